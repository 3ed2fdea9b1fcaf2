import shutil
from typing_extensions import override

from structmapper import utils

from .thirdparty import ThirdParty


class ClangFormat(ThirdParty):
    def __init__(self, file_path, style="file"):
        self.file_path = file_path
        self.style = style

    @staticmethod
    @override
    def check_requirements() -> list[str]:
        if not shutil.which("clang-format"):
            return ["clang-format"]
        return []

    def format(self):
        if self.check_requirements():
            raise OSError("clang-format is not installed")
        cmd = ["clang-format", "-i", f"--style={self.style}", self.file_path]
        result = utils.run_command(cmd)
        if result.returncode != 0:
            raise OSError(f"Failed to format the file: {self.file_path}: {result.stderr.strip()}")
