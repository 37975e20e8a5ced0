"""
Runtime Configuration Store.

Settings are resolved in three layers, later layers winning:

1.  Field defaults of ``RuntimeConfig``.
2.  The ``[tool.param_twin]`` table of the nearest ``pyproject.toml``.
3.  Explicit overrides (CLI flags) and, for secrets, environment variables.

Credentials are never read from files: the similarity index API key comes from
``PARAM_TWIN_INDEX_API_KEY`` (or ``PINECONE_API_KEY``).
"""

import os
import tomllib
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

from pydantic import BaseModel, Field, ValidationError, field_validator

from param_twin.enums import NamingStrategyKind
from param_twin.errors import ConfigurationError

API_KEY_ENV_VARS = ("PARAM_TWIN_INDEX_API_KEY", "PINECONE_API_KEY")
INDEX_HOST_ENV_VAR = "PARAM_TWIN_INDEX_HOST"
EMBEDDING_API_KEY_ENV_VAR = "PARAM_TWIN_EMBEDDING_API_KEY"

_STRATEGY_ALIASES = {
  "deterministic": NamingStrategyKind.DETERMINISTIC,
  "heuristic": NamingStrategyKind.DETERMINISTIC,
  "similarity-based": NamingStrategyKind.SIMILARITY,
  "similarity_based": NamingStrategyKind.SIMILARITY,
  "similarity": NamingStrategyKind.SIMILARITY,
}


class RuntimeConfig(BaseModel):
  """
  Configuration container passed into the transformation engine.
  """

  naming_strategy: NamingStrategyKind = Field(
    NamingStrategyKind.SIMILARITY, description="Which naming strategy names the duplicated parameter."
  )
  suggestion_count: int = Field(5, ge=1, description="Neighbours requested from the similarity index.")

  embedding_dim: int = Field(384, ge=1, description="Size of the context embedding vectors.")
  embedding_url: Optional[str] = Field(
    None, description="OpenAI-compatible embeddings endpoint. Offline feature hashing is used when unset."
  )
  embedding_model: str = Field("all-MiniLM-L6-v2", description="Model name sent to the embeddings endpoint.")
  embedding_api_key: Optional[str] = Field(None, repr=False, description="Bearer token for the embeddings endpoint.")

  index_host: Optional[str] = Field(None, description="Host of the remote similarity index.")
  index_namespace: str = Field("code-contexts", description="Namespace of the naming corpus inside the index.")
  index_api_key: Optional[str] = Field(None, repr=False, description="API key of the remote similarity index.")
  corpus_path: Optional[Path] = Field(
    None, description="Local JSON similarity index. When set, the remote index is not used."
  )

  request_timeout: float = Field(30.0, gt=0, description="Timeout (seconds) for embedding and index requests.")

  @field_validator("naming_strategy", mode="before")
  @classmethod
  def validate_strategy(cls, v: Any) -> Any:
    """
    Accepts the strategy selector case-insensitively, with a few aliases.

    Raises:
        ValueError: If the selector is unknown.
    """
    if isinstance(v, NamingStrategyKind):
      return v
    key = str(v).strip().lower()
    if key not in _STRATEGY_ALIASES:
      allowed = ", ".join(kind.value for kind in NamingStrategyKind)
      raise ValueError(f"Unknown naming strategy: '{v}'. Supported strategies: {allowed}")
    return _STRATEGY_ALIASES[key]

  @property
  def uses_local_index(self) -> bool:
    return self.corpus_path is not None

  def validate_credentials(self) -> None:
    """
    Checks that the selected strategy can reach its collaborators.

    Raises:
        ConfigurationError: If similarity-based naming needs the remote index
            and its host or API key is missing.
    """
    if self.naming_strategy != NamingStrategyKind.SIMILARITY or self.uses_local_index:
      return
    if not self.index_api_key:
      raise ConfigurationError(
        f"{API_KEY_ENV_VARS[0]} environment variable is not set. Set it, configure 'corpus_path', "
        "or use --strategy deterministic."
      )
    if not self.index_host:
      raise ConfigurationError(
        f"No similarity index host configured. Set 'index_host' in [tool.param_twin] or {INDEX_HOST_ENV_VAR}."
      )

  @classmethod
  def load(
    cls,
    naming_strategy: Optional[str] = None,
    suggestion_count: Optional[int] = None,
    corpus_path: Optional[Path] = None,
    search_path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
  ) -> "RuntimeConfig":
    """
    Loads configuration from pyproject.toml and overrides with explicit arguments.

    Args:
        naming_strategy: Override for the strategy selector.
        suggestion_count: Override for the number of neighbours.
        corpus_path: Override for the local index file.
        search_path: Directory to start searching for TOML config.
        environ: Environment mapping (defaults to ``os.environ``).

    Returns:
        RuntimeConfig: The fully resolved configuration object.

    Raises:
        ConfigurationError: If the merged settings fail validation.
    """
    env = os.environ if environ is None else environ
    toml_config, toml_dir = _load_toml_settings(search_path or Path.cwd())

    settings: Dict[str, Any] = {k: v for k, v in toml_config.items() if k in cls.model_fields}
    for secret in ("index_api_key", "embedding_api_key"):
      settings.pop(secret, None)

    if toml_dir is not None and "corpus_path" in settings:
      settings["corpus_path"] = (toml_dir / Path(settings["corpus_path"])).resolve()

    if naming_strategy is not None:
      settings["naming_strategy"] = naming_strategy
    if suggestion_count is not None:
      settings["suggestion_count"] = suggestion_count
    if corpus_path is not None:
      settings["corpus_path"] = corpus_path

    api_key = next((env[name] for name in API_KEY_ENV_VARS if env.get(name, "").strip()), None)
    if api_key:
      settings["index_api_key"] = api_key.strip()
    if env.get(INDEX_HOST_ENV_VAR, "").strip():
      settings["index_host"] = env[INDEX_HOST_ENV_VAR].strip()
    if env.get(EMBEDDING_API_KEY_ENV_VAR, "").strip():
      settings["embedding_api_key"] = env[EMBEDDING_API_KEY_ENV_VAR].strip()

    try:
      return cls(**settings)
    except ValidationError as e:
      raise ConfigurationError(f"Invalid configuration: {e}") from e


def _load_toml_settings(start_path: Path) -> Tuple[Dict[str, Any], Optional[Path]]:
  """
  Searches ``start_path`` and its parents for 'pyproject.toml' and extracts config.

  Args:
      start_path: Directory to start search from.

  Returns:
      Tuple[Dict, Optional[Path]]: The ``[tool.param_twin]`` table and the directory it was found in.

  Raises:
      ConfigurationError: If the nearest pyproject.toml cannot be parsed.
  """
  current = start_path.resolve()

  for parent in [current, *current.parents]:
    toml_path = parent / "pyproject.toml"
    if toml_path.is_file():
      try:
        with open(toml_path, "rb") as f:
          data = tomllib.load(f)
      except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigurationError(f"Cannot read {toml_path}: {e}") from e

      section = data.get("tool", {}).get("param_twin")
      if section is None:
        continue
      return section, parent

  return {}, None
