import os
import re
import shutil
import subprocess
from collections import namedtuple
from pathlib import Path
from typing import Sequence

import tomli as toml

from structmapper import logging as structmapper_logging

logger = structmapper_logging.get_logger(__name__)

ProcessResult = namedtuple("ProcessResult", ["stdout", "stderr", "returncode"])

_RESOURCE_DIR = Path(__file__).resolve().parent / "_resources"


def resources_dir() -> Path:
    """Directory holding the bundled default config and `structmapper.h`."""
    return _RESOURCE_DIR


def _merge_configs(config, default_config):
    config_out = {}

    for key, default_value in default_config.items():
        if key in config:
            if isinstance(config[key], dict) and isinstance(default_value, dict):
                config_out[key] = _merge_configs(config[key], default_value)
            elif isinstance(config[key], dict) or isinstance(default_value, dict):
                raise TypeError(f"Type mismatch for key '{key}': "
                                f"config has {type(config[key])}, default_config has {type(default_value)}")
            # Otherwise, config[key] takes precedence
            else:
                config_out[key] = config[key]
        else:
            config_out[key] = default_value

    # Add keys that are only in config
    for key, value in config.items():
        if key not in default_config:
            config_out[key] = value

    return config_out


def load_default_config():
    """Load the bundled default configuration from packaged resources."""
    candidate = _RESOURCE_DIR / "structmapper.default.toml"
    if candidate.is_file():
        with open(candidate, "rb") as f:
            return toml.load(f)

    raise FileNotFoundError("Could not load _resources/structmapper.default.toml")


def try_load_config(config_file=None):
    """Load user configuration merged with defaults.

    Resolution order:
    1. Explicit `config_file` argument.
    2. `STRUCTMAPPER_CONFIG` environment variable.
    3. `./structmapper.toml` relative to current working directory.
    If none are found, return the default config alone.
    """
    default_config = load_default_config()

    def _load_user_config(path: Path) -> dict:
        with open(path, "rb") as f:
            return toml.load(f)

    if config_file:
        candidate = Path(config_file).expanduser()
        if not candidate.is_file():
            raise FileNotFoundError(f"Could not find config file {candidate}")
        user_config = _load_user_config(candidate)
        return _merge_configs(user_config, default_config)

    env_candidate = os.environ.get("STRUCTMAPPER_CONFIG")
    if env_candidate:
        env_path = Path(env_candidate).expanduser()
        if not env_path.is_file():
            raise FileNotFoundError(f"STRUCTMAPPER_CONFIG={env_candidate} does not point to a readable file")
        user_config = _load_user_config(env_path)
        return _merge_configs(user_config, default_config)

    cwd_candidate = Path.cwd() / "structmapper.toml"
    if cwd_candidate.is_file():
        user_config = _load_user_config(cwd_candidate)
        return _merge_configs(user_config, default_config)

    logger.debug("No user config found; falling back to default configuration only")
    return default_config


def get_compiler() -> str:
    if shutil.which("clang"):
        compiler = "clang"
    elif shutil.which("gcc"):
        compiler = "gcc"
    else:
        raise OSError("No C compiler found")

    return compiler


def get_compiler_include_paths(language: str = "c") -> list[str]:
    compiler = get_compiler()
    cmd = [compiler, '-v', '-E', '-x', language, '/dev/null']
    result = run_command(cmd)
    compile_output = result.stderr
    search_include_paths = []

    add_include_path = False
    for line in compile_output.split('\n'):
        if line.startswith('#include <...> search starts here:'):
            add_include_path = True
            continue
        if line.startswith('End of search list.'):
            break

        if add_include_path:
            search_include_paths.append(line.strip())

    return search_include_paths


def run_command(
    cmd: Sequence[str | os.PathLike[str]],
    *,
    capture_output: bool = True,
    text: bool = True,
    timeout: float | None = None,
    cwd: str | os.PathLike[str] | None = None,
    check: bool = False,
) -> ProcessResult:
    completed = subprocess.run(
        cmd,
        stdout=subprocess.PIPE if capture_output else None,
        stderr=subprocess.PIPE if capture_output else None,
        cwd=cwd,
        text=text,
        timeout=timeout,
        check=False,
    )
    stdout = completed.stdout if capture_output and completed.stdout is not None else ""
    stderr = completed.stderr if capture_output and completed.stderr is not None else ""
    result = ProcessResult(stdout, stderr, completed.returncode)
    if check and result.returncode != 0:
        raise subprocess.CalledProcessError(result.returncode, cmd, stdout, stderr)
    return result


def save_code(path, code, clang_format=False):
    path_dir = os.path.dirname(path)
    if path_dir:
        os.makedirs(path_dir, exist_ok=True)
    with open(path, "w") as f:
        f.write(code)
    if not clang_format:
        return
    # imported here, thirdparty depends on this module
    from structmapper.thirdparty import ClangFormat
    formatter = ClangFormat(path)
    try:
        formatter.format()
    except OSError:
        logger.warning("Cannot format %s", path)  # allow to continue


_IDENTIFIER_SLUG = re.compile(r"[^0-9A-Za-z_]+")


def identifier_slug(text: str) -> str:
    """Turn a qualified type name into something usable in file and macro names."""
    slug = _IDENTIFIER_SLUG.sub("_", text.replace("::", "_")).strip("_")
    return slug or "unnamed"
