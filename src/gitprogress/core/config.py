"""TOML config loader: packaged defaults + per-repository merge."""

import shutil
import subprocess
import tomllib
from dataclasses import dataclass, replace
from pathlib import Path

import tomli_w

from .constants import DEFAULT_PUSH_PHASES, REPO_CONFIG_NAME

DEFAULTS_PATH = Path(__file__).parent.parent / "defaults.toml"


@dataclass(frozen=True)
class PushOptions:
    """Options for a single push invocation.

    Built fresh for every call; never shared between invocations.
    """
    enable_progress: bool = True
    remote_name: str = "origin"
    local_branch: str = "HEAD"
    upstream_branch: str | None = None
    set_upstream: bool = False

    @classmethod
    def from_config(cls, config: dict, **overrides) -> "PushOptions":
        """Build options from the [push] section, explicit overrides win.

        Overrides that are None are ignored so CLI flags left unset fall
        through to the config.
        """
        push_cfg = config.get("push", {})
        opts = cls(
            enable_progress=bool(push_cfg.get("progress", True)),
            remote_name=push_cfg.get("remote", "origin"),
            set_upstream=bool(push_cfg.get("set_upstream", False)),
        )
        return replace(opts, **{k: v for k, v in overrides.items() if v is not None})

    @property
    def refspec(self) -> str:
        if self.upstream_branch:
            return f"{self.local_branch}:{self.upstream_branch}"
        return self.local_branch


def load_defaults() -> dict:
    """Load the packaged defaults.toml."""
    with open(DEFAULTS_PATH, "rb") as f:
        return tomllib.load(f)


def load_repo_config(repo_path: Path) -> dict:
    """Load <repo>/.gitprogress.toml, merged over defaults."""
    defaults = load_defaults()
    repo_toml = Path(repo_path) / REPO_CONFIG_NAME
    if repo_toml.exists():
        with open(repo_toml, "rb") as f:
            overrides = tomllib.load(f)
        _deep_merge(defaults, overrides)
    return defaults


def save_repo_config(repo_path: Path, config: dict) -> Path:
    """Write a .gitprogress.toml into the repository root."""
    repo_toml = Path(repo_path) / REPO_CONFIG_NAME
    with open(repo_toml, "wb") as f:
        tomli_w.dump(config, f)
    return repo_toml


def get_git_executable(config: dict) -> str:
    """Resolve the git executable from config, raising if not found."""
    exe = config.get("git", {}).get("executable")
    if not exe:
        raise ValueError("Git executable not configured: git.executable")
    if Path(exe).is_absolute():
        if not Path(exe).exists():
            raise FileNotFoundError(f"Git not found at configured path: {exe}")
        return exe
    resolved = shutil.which(exe)
    if resolved is None:
        raise FileNotFoundError(f"Git executable not found on PATH: {exe}")
    return resolved


def get_git_env(config: dict) -> dict[str, str]:
    """Extra environment variables for git child processes."""
    return {str(k): str(v) for k, v in config.get("git", {}).get("env", {}).items()}


def get_push_phases(config: dict) -> list[tuple[str, float]]:
    """Read the ordered push phase table as (title, weight) pairs."""
    entries = config.get("progress", {}).get("phases")
    if not entries:
        return list(DEFAULT_PUSH_PHASES)
    phases = []
    for entry in entries:
        try:
            phases.append((str(entry["title"]), float(entry["weight"])))
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Invalid progress phase entry: {entry!r}") from e
    return phases


def check_git(config: dict) -> tuple[bool, str]:
    """Check that git is available.

    Returns:
        (ok, message) — ok=True if ready, message explains why not
    """
    try:
        exe = get_git_executable(config)
    except (ValueError, FileNotFoundError) as e:
        return False, str(e)
    try:
        proc = subprocess.run(
            [exe, "--version"], capture_output=True, text=True, timeout=15,
        )
    except (subprocess.TimeoutExpired, OSError) as e:
        return False, f"Failed to run {exe}: {e}"
    if proc.returncode != 0:
        return False, f"{exe} --version exited with code {proc.returncode}"
    return True, f"{proc.stdout.strip()} at {exe}"


def _deep_merge(base: dict, override: dict) -> None:
    """Merge override into base in-place, recursing into dicts."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
