"""
Conversion request model and argument builder for ``python -m mlx_lm convert``
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from .config import CONVERSION_MODULE, CONVERT_SUBCOMMAND
from .errors import PreconditionViolation

logger = logging.getLogger(__name__)


class QuantizationLevel(str, Enum):
    NONE = "none"
    Q4 = "4bit"
    Q8 = "8bit"

    @property
    def bits(self) -> Optional[int]:
        return {"4bit": 4, "8bit": 8}.get(self.value)

    @property
    def arguments(self) -> List[str]:
        if self.bits is None:
            return []
        return ["-q", "--q-bits", str(self.bits)]

    @classmethod
    def parse(cls, value) -> "QuantizationLevel":
        if isinstance(value, cls):
            return value
        text = str(value or "none").strip().lower()
        aliases = {"": "none", "4": "4bit", "q4": "4bit", "8": "8bit", "q8": "8bit"}
        text = aliases.get(text, text)
        try:
            return cls(text)
        except ValueError:
            choices = ", ".join(level.value for level in cls)
            raise PreconditionViolation(f"Unsupported quantization level: {value} (choose from {choices})")


@dataclass(frozen=True)
class ConversionRequest:
    hf_path: str
    upload_repo: str = ""
    quantization: QuantizationLevel = QuantizationLevel.NONE
    upload: bool = False
    mlx_path: Optional[str] = None

    def validate(self):
        if not self.hf_path.strip():
            raise PreconditionViolation("ERROR: Input Hugging Face repo ID cannot be empty.")
        if self.upload and not self.upload_repo.strip():
            raise PreconditionViolation("ERROR: Output Repo ID cannot be empty when uploading.")

    @property
    def description(self) -> str:
        return "conversion and upload" if self.upload else "conversion"

    def arguments(self) -> List[str]:
        return build_conversion_arguments(
            self.hf_path, self.upload_repo, self.quantization, self.upload, mlx_path=self.mlx_path
        )


def build_conversion_arguments(
    hf_path: str,
    upload_repo: str,
    quantization: QuantizationLevel,
    upload: bool,
    mlx_path: Optional[str] = None,
) -> List[str]:
    """
    Interpreter-relative arguments for one conversion run.

    Returns:
        ["-m", "mlx_lm", "convert", "--hf-path", <src>, *quant flags,
         optional "--mlx-path" <dir>, optional "--upload-repo" <dest>]
    """
    args = ["-m", CONVERSION_MODULE, CONVERT_SUBCOMMAND, "--hf-path", hf_path]
    args += QuantizationLevel.parse(quantization).arguments
    if mlx_path:
        args += ["--mlx-path", mlx_path]
    if upload and upload_repo:
        args += ["--upload-repo", upload_repo]
    logger.debug(f"Conversion arguments: {args}")
    return args
