"""打包流水线的各个步骤"""

from .build_step import BuildStep
from .input_validation_step import InputValidationStep
from .version_extraction_step import VersionExtractionStep
from .archive_step import ArchiveStep
from .hashing_step import HashingStep
from .manifest_step import ManifestStep

__all__ = [
    "BuildStep",
    "InputValidationStep",
    "VersionExtractionStep",
    "ArchiveStep",
    "HashingStep",
    "ManifestStep",
]
