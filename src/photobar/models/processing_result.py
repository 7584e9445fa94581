"""
Processing Result Model

Represents the result of processing a single source image.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from .metadata_record import MetadataRecord


class ProcessingOutcome(Enum):
    """How a source image ended up in the output tiers"""
    SUCCESS = "success"
    FALLBACK_SUCCESS = "fallback_success"
    FAILURE = "failure"


@dataclass
class ProcessingResult:
    """
    Result from processing a single image.
    
    On FAILURE both tier paths hold a plain-text error placeholder.
    """
    source: Path
    outcome: ProcessingOutcome
    full_path: Optional[Path] = None
    thumb_path: Optional[Path] = None
    metadata: Optional[MetadataRecord] = None
    error: Optional[str] = None
    
    @property
    def success(self) -> bool:
        """Check if both tiers hold real images"""
        return self.outcome is not ProcessingOutcome.FAILURE
    
    @property
    def used_fallback(self) -> bool:
        """Check if the primary path failed"""
        return self.outcome is not ProcessingOutcome.SUCCESS
    
    @property
    def failed(self) -> bool:
        """Check if placeholders were written"""
        return self.outcome is ProcessingOutcome.FAILURE
