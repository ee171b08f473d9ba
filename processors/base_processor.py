"""
Base processor class - abstract interface for trace processing operations.
This ensures all processors follow the same contract.
"""
from abc import ABC, abstractmethod
from typing import Dict, Any, Optional, Callable
import importlib
from models.segy_dataset import SegyDataset

# Type alias for progress callbacks: (current, total, message) -> None
ProgressCallback = Callable[[int, int, str], None]


class BaseProcessor(ABC):
    """
    Abstract base class for trace processors.

    All processors must:
    1. Be immutable (don't modify input data)
    2. Return new SegyDataset object
    3. Validate parameters in __init__
    4. Provide clear parameter description
    """

    def __init__(self, **params):
        """
        Initialize processor with parameters.

        Args:
            **params: Processor-specific parameters
        """
        self.params = params
        self._progress_callback: Optional[ProgressCallback] = None
        self._validate_params()

    def set_progress_callback(self, callback: Optional[ProgressCallback]) -> 'BaseProcessor':
        """
        Set progress callback for processing status updates.

        Args:
            callback: Function(current, total, message), or None to disable

        Returns:
            self for method chaining
        """
        self._progress_callback = callback
        return self

    def _report_progress(self, current: int, total: int, message: str = ""):
        if self._progress_callback is not None:
            self._progress_callback(current, total, message)

    @abstractmethod
    def _validate_params(self):
        """Validate processor parameters. Raise ValueError if invalid."""
        pass

    @abstractmethod
    def process(self, data: SegyDataset) -> SegyDataset:
        """
        Process a dataset.

        Args:
            data: Input dataset

        Returns:
            Processed dataset (new object, input unchanged)
        """
        pass

    @abstractmethod
    def get_description(self) -> str:
        """Get human-readable description of this processor and its parameters."""
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.params})"

    def to_dict(self) -> Dict[str, Any]:
        """Serialize processor configuration (class location and parameters)."""
        return {
            'class_name': self.__class__.__name__,
            'module': self.__class__.__module__,
            'params': self.params.copy()
        }

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> 'BaseProcessor':
        """
        Reconstruct processor from to_dict() output.

        Raises:
            ValueError: If config is invalid or class not found
        """
        try:
            module = importlib.import_module(config['module'])
            processor_class = getattr(module, config['class_name'])
        except KeyError as e:
            raise ValueError(f"Invalid processor config - missing key: {e}")
        except ImportError as e:
            raise ValueError(f"Cannot import processor module '{config.get('module')}': {e}")
        except AttributeError as e:
            raise ValueError(f"Processor class '{config.get('class_name')}' not found: {e}")

        if not (isinstance(processor_class, type) and issubclass(processor_class, BaseProcessor)):
            raise ValueError(f"{config['class_name']} is not a BaseProcessor subclass")
        return processor_class(**config.get('params', {}))
