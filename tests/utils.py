import os
import shutil
import subprocess
import tempfile

import pytest

from structmapper.mapping import MemberDescriptor, TypeDescriptor
from structmapper.utils import load_default_config

C_EXAMPLES_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "c_examples")


def example_path(*parts):
    return os.path.join(C_EXAMPLES_DIR, *parts)


def _as_member(entry):
    if isinstance(entry, MemberDescriptor):
        return entry
    return MemberDescriptor(entry)


def _as_directives(entries):
    return tuple((entry,) if isinstance(entry, str) else tuple(entry) for entry in entries)


def make_type(identity, members=(), map_from=(), map_to=(), spelling="", header=""):
    """TypeDescriptor shorthand: members may be names, directives may be single names."""
    return TypeDescriptor(
        identity=identity,
        name=identity.split("::")[-1],
        members=tuple(_as_member(m) for m in members),
        map_from=_as_directives(map_from),
        map_to=_as_directives(map_to),
        spelling=spelling,
        header=header,
    )


def make_index(*descriptors):
    return {d.identity: d for d in descriptors}


def find_compiler():
    for compiler in ("clang", "gcc", "cc"):
        if shutil.which(compiler):
            return compiler
    return None


def can_compile(code: str, include_dirs=()) -> bool:
    compiler = find_compiler()
    assert compiler is not None
    with tempfile.TemporaryDirectory() as tmpdirname:
        with open(f"{tmpdirname}/a.c", "w") as f:
            f.write(code)
        cmd = [compiler, "-fsyntax-only", "-Wall", "-Werror"]
        cmd.extend(f"-I{d}" for d in include_dirs)
        cmd.append(f"{tmpdirname}/a.c")
        result = subprocess.run(cmd, capture_output=True, text=True)
        return result.returncode == 0


@pytest.fixture
def config():
    return load_default_config()
