"""
Pipeline Module - stage sequencing and stream consumption

Exports:
- WritingSession / PipelineStage / InstructionRecord (session state)
- StageTransport / HttpStageTransport / LocalStageTransport
- PipelineClient (frame consumer)
- StagePipelineController (state machine)
"""

from .state import (
    WritingSession,
    PipelineStage,
    InstructionRecord,
    InstructionStatus,
)
from .transport import StageTransport, HttpStageTransport, LocalStageTransport
from .client import PipelineClient
from .controller import StagePipelineController

__all__ = [
    'WritingSession',
    'PipelineStage',
    'InstructionRecord',
    'InstructionStatus',
    'StageTransport',
    'HttpStageTransport',
    'LocalStageTransport',
    'PipelineClient',
    'StagePipelineController',
]
