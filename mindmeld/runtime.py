from __future__ import annotations

import pathlib
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Union

from .bytecode import Instruction
from .errors import SourceAccessError
from .interpreter import DirectInterpreter
from .machine import DEFAULT_TAPE_LENGTH, InputSource, Machine, OutputSink
from .sanitizer import SanitizerMode, sanitize
from .tokenizer import tokenize
from .vm import TapeVM


class ExecutionMode(Enum):
    TOKENIZED = "tokenized"
    DIRECT = "direct"


@dataclass(frozen=True)
class RunConfig:
    sanitizer_mode: SanitizerMode = SanitizerMode.DEFAULT
    execution_mode: ExecutionMode = ExecutionMode.TOKENIZED
    tape_length: int = DEFAULT_TAPE_LENGTH
    debug: bool = False


DEFAULT_CONFIG = RunConfig()


def compile_source(source: Union[str, bytes], config: RunConfig = DEFAULT_CONFIG) -> Sequence[Instruction]:
    return tokenize(sanitize(source, config.sanitizer_mode))


def build_machine(
    source: Union[str, bytes],
    config: RunConfig = DEFAULT_CONFIG,
    *,
    input_source: Optional[InputSource] = None,
    output_sink: Optional[OutputSink] = None,
) -> Machine:
    """Sanitize ``source`` and prepare the machine selected by ``config``.

    Malformed programs are rejected here, before any instruction runs.
    """
    stream = sanitize(source, config.sanitizer_mode)
    options = dict(tape_length=config.tape_length, input_source=input_source, output_sink=output_sink)
    if config.execution_mode is ExecutionMode.DIRECT:
        return DirectInterpreter(stream, **options)
    return TapeVM(tokenize(stream), **options)


def run_source(
    source: Union[str, bytes],
    config: RunConfig = DEFAULT_CONFIG,
    *,
    input_source: Optional[InputSource] = None,
    output_sink: Optional[OutputSink] = None,
) -> str:
    machine = build_machine(source, config, input_source=input_source, output_sink=output_sink)
    return machine.run(debug=config.debug)


def read_source(path: Union[str, pathlib.Path]) -> str:
    try:
        data = pathlib.Path(path).read_bytes()
    except OSError as exc:
        raise SourceAccessError(str(path), exc.strerror or str(exc)) from exc
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return data.decode("latin-1")


def run_script(
    path: Union[str, pathlib.Path],
    config: RunConfig = DEFAULT_CONFIG,
    *,
    input_source: Optional[InputSource] = None,
    output_sink: Optional[OutputSink] = None,
) -> str:
    return run_source(read_source(path), config, input_source=input_source, output_sink=output_sink)


__all__ = [
    "ExecutionMode",
    "RunConfig",
    "DEFAULT_CONFIG",
    "compile_source",
    "build_machine",
    "run_source",
    "read_source",
    "run_script",
]
