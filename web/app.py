"""FastAPI web adapter for the CHIP-8 interpreter."""

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
from typing import Literal, Optional

from chip8 import run_program, RunOptions, ImageFormatError
from chip8.cpu import PROGRAM_START
from chip8.memory import MEMORY_SIZE
from chip8.loader import image_bytes, parse_hex_image


# Constants
MAX_PROGRAM_SIZE = 50 * 1024  # characters of hex text
MAX_IMAGE_SIZE = MEMORY_SIZE - PROGRAM_START  # bytes of program memory


# Request/Response models
class RunOptionsModel(BaseModel):
    max_steps: int = Field(default=10000, ge=1, le=1000000)
    trace: bool = True
    trace_include_registers: bool = False
    collision_mode: Literal["any", "last_bit"] = "any"
    stop_on_self_jump: bool = True
    seed: Optional[int] = None


class RunRequest(BaseModel):
    program: str
    options: Optional[RunOptionsModel] = None


class FinalState(BaseModel):
    v: list[int]
    i: int
    pc: int
    sp: int
    stack: list[int]
    dt: int
    st: int


class RunResponse(BaseModel):
    status: str
    halted: bool
    steps_executed: int
    final_state: FinalState
    display: list[str]
    trace: list[dict]
    error: Optional[dict] = None


# Create FastAPI app
app = FastAPI(
    title="CHIP-8 Interpreter",
    description="Web API for stepping CHIP-8 programs with tracing",
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


@app.post("/api/run", response_model=RunResponse)
async def run_code(request: RunRequest):
    """Execute a CHIP-8 program given as hex opcode text.

    Args:
        request: Program image text and execution options

    Returns:
        Execution result with screen contents, trace, and final state
    """
    if len(request.program) > MAX_PROGRAM_SIZE:
        raise HTTPException(
            status_code=400,
            detail=f"Program size exceeds limit of {MAX_PROGRAM_SIZE} characters",
        )

    opts = request.options or RunOptionsModel()
    run_opts = RunOptions(
        max_steps=opts.max_steps,
        trace=opts.trace,
        trace_include_registers=opts.trace_include_registers,
        collision_mode=opts.collision_mode,
        stop_on_self_jump=opts.stop_on_self_jump,
        seed=opts.seed,
    )

    try:
        image = image_bytes(parse_hex_image(request.program))
    except ImageFormatError as e:
        raise HTTPException(status_code=400, detail=e.message)
    if len(image) > MAX_IMAGE_SIZE:
        raise HTTPException(
            status_code=400,
            detail=f"Program image of {len(image)} bytes exceeds {MAX_IMAGE_SIZE} bytes of program memory",
        )

    result = run_program(image, options=run_opts)

    return result.to_dict()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8080)
