"""FastAPI web adapter for the CPU simulator."""

import logging
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel, Field

from cpusim import (
    CpuState,
    InvalidState,
    RunOptions,
    assemble,
    execute,
    run_program,
)


logger = logging.getLogger(__name__)

# Constants
MAX_PROGRAM_SIZE = 50 * 1024  # 50KB
STATIC_DIR = Path(__file__).parent.parent / "static"


# Request/Response models
class FlagsModel(BaseModel):
    zero: bool = False
    negative: bool = False


class CpuStateModel(BaseModel):
    registers: dict[str, int] = Field(default_factory=dict)
    memory: dict[str, int] = Field(default_factory=dict)
    ip: int = Field(default=0, ge=0)
    flags: FlagsModel = Field(default_factory=FlagsModel)


class RunOptionsModel(BaseModel):
    max_steps: int = Field(default=10000, ge=1, le=1000000)
    history: bool = True
    initial_registers: dict[str, int] = Field(default_factory=dict)
    initial_memory: dict[str, int] = Field(default_factory=dict)


class AssembleRequest(BaseModel):
    program: str


class AssembleResponse(BaseModel):
    instructions: list[str]
    binary: list[str]
    labels: dict[str, int]


class StepRequest(BaseModel):
    state: CpuStateModel = Field(default_factory=CpuStateModel)
    instruction: str


class StepResponse(BaseModel):
    state: CpuStateModel
    description: str


class RunRequest(BaseModel):
    program: str
    options: Optional[RunOptionsModel] = None


class RunResponse(BaseModel):
    status: str
    steps_executed: int
    final_state: dict
    instructions: list[str]
    binary: list[str]
    labels: dict[str, int]
    history: list[dict]
    error: Optional[dict] = None


# Create FastAPI app
app = FastAPI(
    title="CPU Simulator",
    description="Web API for assembling and stepping 8-register assembly programs",
    version="0.1.0",
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _check_program_size(program: str) -> None:
    if len(program) > MAX_PROGRAM_SIZE:
        raise HTTPException(
            status_code=400,
            detail=f"Program size exceeds limit of {MAX_PROGRAM_SIZE} bytes",
        )


def _to_state(model: CpuStateModel) -> CpuState:
    try:
        return CpuState.from_dict(model.model_dump())
    except InvalidState as e:
        raise HTTPException(status_code=400, detail=e.message)


@app.post("/api/assemble", response_model=AssembleResponse)
async def assemble_code(request: AssembleRequest):
    """Assemble a program into normalized instructions and binary words."""
    _check_program_size(request.program)
    return assemble(request.program).to_dict()


@app.post("/api/step", response_model=StepResponse)
async def step_instruction(request: StepRequest):
    """Execute one instruction against the given state.

    Args:
        request: Current CPU state and the instruction text

    Returns:
        The new state and a description of the step
    """
    state = _to_state(request.state)
    result = execute(state, request.instruction)
    return {"state": result.state.to_dict(), "description": result.description}


@app.post("/api/run", response_model=RunResponse)
async def run_code(request: RunRequest):
    """Assemble and run a program, returning its history.

    Args:
        request: Program code and execution options

    Returns:
        Execution result with final state and history
    """
    _check_program_size(request.program)

    # Build options
    opts = request.options or RunOptionsModel()

    # Convert initial_memory keys from string to int
    initial_memory = {}
    for k, v in opts.initial_memory.items():
        try:
            initial_memory[int(k)] = v
        except ValueError:
            raise HTTPException(
                status_code=400,
                detail=f"Invalid memory address key: {k}",
            )

    run_opts = RunOptions(
        max_steps=opts.max_steps,
        history=opts.history,
        initial_registers=opts.initial_registers,
        initial_memory=initial_memory,
    )

    try:
        result = run_program(request.program, options=run_opts)
    except InvalidState as e:
        raise HTTPException(status_code=400, detail=e.message)

    logger.info("Run finished with status %s after %d steps", result.status, result.steps_executed)
    return result.to_dict()


# Mount static files AFTER API routes to prevent shadowing
if STATIC_DIR.exists():
    app.mount("/", StaticFiles(directory=str(STATIC_DIR), html=True), name="static")


if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(level=logging.INFO)
    uvicorn.run(app, host="0.0.0.0", port=8080)
