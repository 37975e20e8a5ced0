"""
Signature Rewriting Logic for Function Definitions.

Adds the duplicated ("twin") parameter next to the original one. The twin keeps
the original's annotation and default and is placed so the signature stays
valid Python:

*   positional-only, regular and keyword-only parameters get their twin directly
    after them, in the same section;
*   ``*args`` gets a keyword-only twin (``def f(*args, args2)``);
*   ``**kwargs`` gets a keyword-only twin placed before it
    (``def f(*, kwargs2, **kwargs)``).

Commas and line breaks follow the existing layout: in a multi-line signature
the twin lands on its own line and a trailing comma stays at the end.
"""

from typing import List, Sequence

import libcst as cst

from param_twin.core.views import ParameterView
from param_twin.enums import ParamKind


def append_twin_parameter(func: cst.FunctionDef, parameter: ParameterView, new_name: str) -> cst.FunctionDef:
  """
  Returns ``func`` with a copy of ``parameter`` named ``new_name``.

  Args:
      func: The function definition to extend. Its parameter list must have the
          same layout as the one ``parameter`` was taken from.
      parameter: The parameter being duplicated.
      new_name: Identifier of the twin.

  Returns:
      The modified function definition.
  """
  params = func.params
  original = _member(params, parameter)
  separator = _separator_whitespace(func)

  twin = original.deep_clone().with_changes(
    name=cst.Name(new_name),
    star=cst.MaybeSentinel.DEFAULT,
    whitespace_after_star=cst.SimpleWhitespace(""),
  )

  if parameter.kind == ParamKind.VAR_KEYWORD:
    twin = twin.with_changes(comma=cst.Comma(whitespace_after=separator), whitespace_after_param=cst.SimpleWhitespace(""))
    return func.with_changes(params=params.with_changes(kwonly_params=[*params.kwonly_params, twin]))

  # The twin takes over whatever closed the original (trailing comma, newline before ')').
  twin = twin.with_changes(comma=original.comma, whitespace_after_param=original.whitespace_after_param)
  lead = original.with_changes(comma=_leading_comma(original, separator), whitespace_after_param=cst.SimpleWhitespace(""))

  if parameter.kind == ParamKind.POSITIONAL_ONLY:
    new_params = params.with_changes(
      posonly_params=_insert_after(params.posonly_params, parameter.section_index, lead, twin)
    )
  elif parameter.kind == ParamKind.POSITIONAL:
    new_params = params.with_changes(params=_insert_after(params.params, parameter.section_index, lead, twin))
  elif parameter.kind == ParamKind.VAR_POSITIONAL:
    new_params = params.with_changes(star_arg=lead, kwonly_params=[twin, *params.kwonly_params])
  else:
    new_params = params.with_changes(
      kwonly_params=_insert_after(params.kwonly_params, parameter.section_index, lead, twin)
    )
  return func.with_changes(params=new_params)


def _member(params: cst.Parameters, parameter: ParameterView) -> cst.Param:
  if parameter.kind == ParamKind.POSITIONAL_ONLY:
    return params.posonly_params[parameter.section_index]
  if parameter.kind == ParamKind.POSITIONAL:
    return params.params[parameter.section_index]
  if parameter.kind == ParamKind.VAR_POSITIONAL:
    return cst.ensure_type(params.star_arg, cst.Param)
  if parameter.kind == ParamKind.KEYWORD_ONLY:
    return params.kwonly_params[parameter.section_index]
  return cst.ensure_type(params.star_kwarg, cst.Param)


def _separator_whitespace(func: cst.FunctionDef) -> cst.BaseParenthesizableWhitespace:
  """Whitespace that introduces a parameter: the signature's own line break, or a space."""
  if isinstance(func.whitespace_before_params, cst.ParenthesizedWhitespace):
    return func.whitespace_before_params.deep_clone()
  return cst.SimpleWhitespace(" ")


def _leading_comma(original: cst.Param, separator: cst.BaseParenthesizableWhitespace) -> cst.Comma:
  if isinstance(original.comma, cst.Comma):
    return original.comma.with_changes(whitespace_after=separator)
  return cst.Comma(whitespace_after=separator)


def _insert_after(section: Sequence[cst.Param], index: int, lead: cst.Param, twin: cst.Param) -> List[cst.Param]:
  members = list(section)
  members[index] = lead
  members.insert(index + 1, twin)
  return members
