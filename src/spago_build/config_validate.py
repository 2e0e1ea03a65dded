# src/spago_build/config_validate.py


from collections import Counter
from typing import Any

from .constants import DEFAULT_STRICT_CONFIG
from .types import RootConfigInput
from .utils_schema import ValidationSummary, check_typed_dict

WHERE = "in the project config"

# flags people copy from the command line into the config file
CLI_ONLY_KEYS = ("watch", "deps_only", "deps-only", "path", "paths")


def _cli_only_keys(parsed_cfg: dict[str, Any]) -> list[str]:
    wanted = {k.lower() for k in CLI_ONLY_KEYS}
    return sorted(k for k in parsed_cfg if k.lower() in wanted)


def _duplicates(values: Any) -> list[str]:
    if not isinstance(values, list):
        return []
    counts = Counter(v for v in values if isinstance(v, str))
    return sorted(v for v, n in counts.items() if n > 1)


def validate_config(
    parsed_cfg: dict[str, Any], *, strict: bool | None = None
) -> ValidationSummary:
    """Validate a loaded config object against RootConfigInput.

    Unknown keys, command-line-only keys and duplicate dependencies are
    warnings; with `strict` (or `strict_config: true` in the file) they fail
    validation too. Wrong value types always do.
    """
    if strict is None:
        from_cfg = parsed_cfg.get("strict_config")
        strict = from_cfg if isinstance(from_cfg, bool) else DEFAULT_STRICT_CONFIG
    summary = ValidationSummary(strict=strict)

    cli_only = _cli_only_keys(parsed_cfg)
    if cli_only:
        summary.warn(
            f"Ignored key{'s' if len(cli_only) > 1 else ''} {', '.join(cli_only)}"
            f" {WHERE}: use --watch, --deps-only or --path on the command line."
        )

    check_typed_dict(parsed_cfg, RootConfigInput, WHERE, summary, skip=cli_only)

    dupes = _duplicates(parsed_cfg.get("dependencies"))
    if dupes:
        summary.warn(f"Duplicate dependencies {WHERE}: {', '.join(dupes)}")

    return summary
