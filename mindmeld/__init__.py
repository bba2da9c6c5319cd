from .bytecode import Action, Instruction, Selector
from .errors import (
    MalformedProgramError,
    MindMeldError,
    MindMeldRuntimeError,
    SourceAccessError,
    TapeBoundsError,
)
from .interpreter import DirectInterpreter
from .machine import Tape
from .runtime import ExecutionMode, RunConfig, build_machine, compile_source, run_script, run_source
from .sanitizer import SanitizerMode, sanitize
from .tokenizer import tokenize
from .vm import TapeVM

__all__ = [
    "Action",
    "Selector",
    "Instruction",
    "sanitize",
    "SanitizerMode",
    "tokenize",
    "Tape",
    "TapeVM",
    "DirectInterpreter",
    "ExecutionMode",
    "RunConfig",
    "build_machine",
    "compile_source",
    "run_source",
    "run_script",
    "MindMeldError",
    "SourceAccessError",
    "MalformedProgramError",
    "MindMeldRuntimeError",
    "TapeBoundsError",
]
