"""Result record returned by edit operations."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class EditResult:
    """Outcome of a trim, cut or silence removal."""

    success: bool
    output_file: Optional[Path]
    new_duration: float = 0.0
    operation: str = ""

    # Batch silence removal only
    removed_duration: Optional[float] = None
    removed_ranges_count: Optional[int] = None

    error: Optional[str] = None

    @classmethod
    def failed(cls, source: Path, operation: str, error: str) -> "EditResult":
        """A result that leaves the caller on ``source``."""
        return cls(success=False, output_file=source, operation=operation, error=error)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "success": self.success,
            "output_file": str(self.output_file) if self.output_file else None,
            "new_duration": self.new_duration,
            "operation": self.operation,
            "removed_duration": self.removed_duration,
            "removed_ranges_count": self.removed_ranges_count,
            "error": self.error,
        }

    def __str__(self) -> str:
        if not self.success:
            return f"{self.operation or 'Edit'} failed: {self.error}"
        lines = [f"{self.operation}: {self.new_duration:.3f}s -> {self.output_file}"]
        if self.removed_ranges_count is not None:
            lines.append(
                f"Removed {self.removed_ranges_count} range(s), "
                f"{self.removed_duration or 0.0:.3f}s"
            )
        return "\n".join(lines)
