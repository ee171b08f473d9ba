#!/usr/bin/env python3
"""
SEG-Y viewer core - command line entry point.

Commands:
    info FILE               Show text header, binary header and trace count
    agc INPUT OUTPUT        Apply AGC to every trace and write a new file
    mock OUTPUT             Write a synthetic sine-wave (or reflection) file

Usage:
    python main.py info line.sgy --headers 5
    python main.py agc line.sgy line_agc.sgy --window-ms 250
    python main.py mock mock.sgy --traces 50 --samples 100
"""
import sys
import logging
import argparse
from typing import List, Optional

import pandas as pd

from models.app_settings import get_settings
from models.segy_headers import SampleFormat
from processors.agc_processor import AGCProcessor
from utils.sample_data import generate_reflection_segy, generate_sine_segy
from utils.segy_import.segy_export import write_segy_file
from utils.segy_import.segy_reader import SegyReader
from utils.segy_import.text_header import text_header_lines

logger = logging.getLogger(__name__)

INFO_HEADER_COLUMNS = ['trace_sequence_line', 'trace_sequence_file', 'field_record',
                       'trace_number', 'cdp', 'offset', 'samples_in_this_trace',
                       'cdp_x', 'cdp_y', 'inline_number', 'crossline_number']


def _format_choices() -> List[int]:
    return [int(f) for f in SampleFormat]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='segyview', description='SEG-Y codec and AGC tool')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable debug logging')
    sub = parser.add_subparsers(dest='command', required=True)

    info = sub.add_parser('info', help='Show file headers')
    info.add_argument('file', type=str, help='SEG-Y file')
    info.add_argument('--headers', type=int, default=0,
                      help='Number of trace headers to print as a table')

    agc = sub.add_parser('agc', help='Apply AGC and write a new file')
    agc.add_argument('input', type=str, help='Input SEG-Y file')
    agc.add_argument('output', type=str, help='Output SEG-Y file')
    agc.add_argument('--window-ms', type=float, default=None,
                     help='AGC window in ms (default from settings)')
    agc.add_argument('--format', type=int, default=None, choices=_format_choices(),
                     help='Sample format for the output (default: input format)')

    mock = sub.add_parser('mock', help='Write a synthetic SEG-Y file')
    mock.add_argument('output', type=str, help='Output SEG-Y file')
    mock.add_argument('--traces', '-t', type=int, default=50, help='Number of traces')
    mock.add_argument('--samples', '-s', type=int, default=100, help='Samples per trace')
    mock.add_argument('--interval', '-i', type=int, default=4000,
                      help='Sample interval in microseconds')
    mock.add_argument('--format', '-f', type=int, default=int(SampleFormat.IEEE_FLOAT),
                      choices=_format_choices(), help='Sample format code')
    mock.add_argument('--reflections', action='store_true',
                      help='Decaying reflections instead of sine waves')
    return parser


def cmd_info(args) -> int:
    reader = SegyReader(args.file)
    info = reader.read_file_info()
    get_settings().add_recent_file(str(reader.filename))

    for line in text_header_lines(info['text_header']):
        print(line.rstrip())
    print()
    print(f"File:            {info['filename']} ({info['file_size']} bytes)")
    print(f"Traces:          {info['n_traces']}")
    print(f"Samples/trace:   {info['n_samples']}")
    print(f"Sample interval: {info['sample_interval']:g} ms")
    print(f"Trace length:    {info['trace_length_ms']:g} ms")
    print(f"Format:          {info['format']}")
    print(f"Units:           {info['units']}")
    if info['trailing_bytes']:
        print(f"Trailing bytes:  {info['trailing_bytes']} (ignored)")
    print()
    for name, value in info['binary_header'].items():
        if value:
            print(f"  {name:28s} {value}")

    if args.headers > 0:
        segy = reader.read()
        frame = segy.dataset.headers_dataframe()[INFO_HEADER_COLUMNS].head(args.headers)
        with pd.option_context('display.width', 200, 'display.max_columns', None):
            print()
            print(frame.to_string(index=False))
    return 0


def cmd_agc(args) -> int:
    settings = get_settings()
    window_ms = args.window_ms if args.window_ms is not None else settings.get_agc_window_ms()

    segy = SegyReader(args.input, settings.get_parse_chunk_size()).read()
    settings.add_recent_file(args.input)

    processor = AGCProcessor.for_file(segy, window_ms)
    processor.set_progress_callback(lambda done, total, msg: logger.debug(f"{msg} ({done}/{total})"))
    logger.info(f"Applying {processor.get_description()}")

    result = segy.with_dataset(processor.process(segy.dataset))
    if args.format is not None:
        result = result.with_binary_header(result.binary_header.replace(sample_format=args.format))

    write_segy_file(args.output, result)
    return 0


def cmd_mock(args) -> int:
    if args.reflections:
        segy = generate_reflection_segy(n_traces=args.traces, n_samples=args.samples,
                                        sample_interval_us=args.interval, sample_format=args.format)
    else:
        segy = generate_sine_segy(n_traces=args.traces, n_samples=args.samples,
                                  sample_interval_us=args.interval, sample_format=args.format)
    write_segy_file(args.output, segy)
    print(f"Mock SEG-Y file generated at {args.output}")
    return 0


COMMANDS = {
    'info': cmd_info,
    'agc': cmd_agc,
    'mock': cmd_mock,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Run the command line tool. Returns the process exit code."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        return COMMANDS[args.command](args)
    except FileNotFoundError as e:
        logger.error(str(e))
        return 1
    except ValueError as e:
        # SegyFormatError and header/dataset mismatches
        logger.error(f"{type(e).__name__}: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
