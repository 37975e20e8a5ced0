"""
Tests for the swappable console and the logging helpers.
"""

from rich.console import Console

from param_twin.utils.console import (
  console,
  get_console,
  log_error,
  log_success,
  log_warning,
  reset_console,
  set_console,
)


def test_set_console_redirects_print_and_logging():
  recorder = Console(record=True, width=120)
  set_console(recorder)
  try:
    console.print("plain output")
    log_success("all good")
    log_warning("careful")
    log_error("broken")
    assert get_console() is recorder
    text = recorder.export_text()
  finally:
    reset_console()

  assert "plain output" in text
  assert "all good" in text
  assert "SUCCESS" in text
  assert "careful" in text
  assert "broken" in text


def test_reset_console_replaces_backend():
  recorder = Console(record=True)
  set_console(recorder)
  reset_console()
  assert get_console() is not recorder
