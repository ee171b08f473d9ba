"""
Background parse worker.

One-shot request/response protocol between a caller (e.g. a viewer front
end) and a single worker thread:

    ParseRequest(data)  ->  ParseProgress(percent)*  then
                            ParseSuccess(dataset, binary_header, text_header)
                            or ParseFailure(message)

The request hands its buffer to the worker and the success response hands
the decoded dataset back; neither side copies or touches the other's
buffer afterwards.
"""
import logging
import queue
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional, Union

from models.segy_dataset import SegyDataset
from models.segy_headers import BinaryHeader
from utils.segy_import.errors import SegyFormatError
from utils.segy_import.segy_reader import DEFAULT_CHUNK_SIZE, SegyParser

logger = logging.getLogger(__name__)


class MessageType(str, Enum):
    PARSE = 'PARSE'
    SUCCESS = 'SUCCESS'
    ERROR = 'ERROR'
    PROGRESS = 'PROGRESS'


@dataclass(frozen=True)
class ParseRequest:
    """Parse a complete SEG-Y byte stream. The caller must not mutate ``data`` after sending."""
    data: Any
    chunk_size: int = DEFAULT_CHUNK_SIZE
    type: MessageType = field(default=MessageType.PARSE, init=False)


@dataclass(frozen=True)
class ParseSuccess:
    dataset: SegyDataset
    binary_header: BinaryHeader
    text_header: str
    type: MessageType = field(default=MessageType.SUCCESS, init=False)


@dataclass(frozen=True)
class ParseFailure:
    message: str
    type: MessageType = field(default=MessageType.ERROR, init=False)


@dataclass(frozen=True)
class ParseProgress:
    percent: float
    type: MessageType = field(default=MessageType.PROGRESS, init=False)


ParseResponse = Union[ParseSuccess, ParseFailure]


def handle_request(request, emit: Optional[Callable[[ParseProgress], None]] = None) -> ParseResponse:
    """
    Serve one request synchronously.

    Structural SEG-Y errors become a ParseFailure carrying the error text;
    nothing partial is returned with it.

    Args:
        request: ParseRequest
        emit: Optional sink for ParseProgress messages
    """
    if not isinstance(request, ParseRequest):
        return ParseFailure(f"Unknown request: {getattr(request, 'type', type(request).__name__)}")

    def progress(done: int, total: int):
        if emit is not None:
            emit(ParseProgress(percent=100.0 * done / total if total else 100.0))

    try:
        segy = SegyParser(request.data, request.chunk_size, progress).parse()
    except SegyFormatError as e:
        logger.warning(f"SEG-Y parse failed: {e}")
        return ParseFailure(str(e))
    except (TypeError, ValueError, MemoryError) as e:
        logger.exception("Unexpected error while parsing SEG-Y data")
        return ParseFailure(f"{type(e).__name__}: {e}")
    except Exception as e:
        logger.exception("Parse worker failed")
        return ParseFailure(f"{type(e).__name__}: {e}")

    return ParseSuccess(dataset=segy.dataset, binary_header=segy.binary_header,
                        text_header=segy.text_header)


class SegyParseWorker:
    """
    Runs parse requests on one dedicated background thread.

    Progress and final responses are put on ``responses`` in the order they
    are produced; submit() also returns a Future of the final response.

    Usage:
        with SegyParseWorker() as worker:
            future = worker.submit(ParseRequest(data))
            response = future.result()
    """

    def __init__(self):
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix='segy-parse')
        self.responses: 'queue.Queue' = queue.Queue()

    def submit(self, request) -> Future:
        return self._executor.submit(self._run, request)

    def _run(self, request) -> ParseResponse:
        logger.debug("Parse worker received request")
        response = handle_request(request, self.responses.put)
        self.responses.put(response)
        return response

    def parse(self, data, timeout: Optional[float] = None) -> ParseResponse:
        """Submit a ParseRequest for ``data`` and wait for the final response."""
        return self.submit(ParseRequest(data)).result(timeout=timeout)

    def shutdown(self, wait: bool = True):
        self._executor.shutdown(wait=wait)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.shutdown()
        return False
