from __future__ import annotations

import io
import logging
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Response, status
from pydantic import BaseModel, Field, validator

from tapebf.bf_machine import DEFAULT_CAPACITY, BrainfuckMachine, BrainfuckRuntimeError
from tapebf.bf_parser import TokenSequence, UnmatchedLoopError
from tapebf.pipeline import compile_source

from .session import MachineRecord, MachineStore

MAX_TAPE_SIZE = 1_000_000

logger = logging.getLogger(__name__)


def _string_to_input_bytes(data: str) -> bytes:
    return data.encode("latin-1")


def _tape_window(machine: BrainfuckMachine, window: int) -> tuple[int, List[int]]:
    start = max(0, machine.cursor - window)
    end = min(machine.capacity, machine.cursor + window + 1)
    return start, list(machine.memory[start:end])


class ProgramRequest(BaseModel):
    code: str = ""
    input: str = ""
    optimize: bool = True
    compress: bool = True
    tape_window: int = Field(default=10, ge=0)

    @validator("input")
    def validate_input(cls, value: str) -> str:
        try:
            value.encode("latin-1")
        except UnicodeEncodeError as exc:
            raise ValueError("input characters must be in the range U+0000-U+00FF") from exc
        return value


class RunRequest(ProgramRequest):
    tape_size: int = Field(default=DEFAULT_CAPACITY, ge=1, le=MAX_TAPE_SIZE)


class MachineConfiguration(BaseModel):
    tape_size: int = Field(default=DEFAULT_CAPACITY, ge=1, le=MAX_TAPE_SIZE)


class MachineState(BaseModel):
    machine_id: Optional[str]
    capacity: int
    cursor: int
    tape_start: int
    tape: List[int]
    runs: int


class RunResponse(BaseModel):
    output: str
    output_bytes: List[int]
    token_count: int
    state: MachineState


def _build_state(
    machine: BrainfuckMachine,
    *,
    window: int,
    machine_id: Optional[str] = None,
    runs: int = 1,
) -> MachineState:
    tape_start, tape = _tape_window(machine, window)
    return MachineState(
        machine_id=machine_id,
        capacity=machine.capacity,
        cursor=machine.cursor,
        tape_start=tape_start,
        tape=tape,
        runs=runs,
    )


def _compile(payload: ProgramRequest) -> TokenSequence:
    try:
        return compile_source(payload.code, optimize=payload.optimize, compress=payload.compress)
    except UnmatchedLoopError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": str(exc), "index": exc.index},
        ) from exc


def _execute(machine: BrainfuckMachine, tokens: TokenSequence, input_text: str) -> bytes:
    output = io.BytesIO()
    machine.input_stream = io.BytesIO(_string_to_input_bytes(input_text))
    machine.output_stream = output
    try:
        machine.run(tokens)
    except BrainfuckRuntimeError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    return output.getvalue()


def _run_response(output: bytes, tokens: TokenSequence, state: MachineState) -> RunResponse:
    return RunResponse(
        output=output.decode("latin-1"),
        output_bytes=list(output),
        token_count=len(tokens),
        state=state,
    )


def create_app(store: Optional[MachineStore] = None) -> FastAPI:
    machine_store = store if store is not None else MachineStore()
    app = FastAPI(title="tapebf API", version="0.1.0")

    def _get_record(machine_id: str) -> MachineRecord:
        try:
            return machine_store.get(machine_id)
        except KeyError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    def _record_state(record: MachineRecord, window: int = 10) -> MachineState:
        return _build_state(
            record.machine,
            window=window,
            machine_id=record.machine_id,
            runs=record.runs,
        )

    @app.post("/api/run", response_model=RunResponse)
    def run_program(payload: RunRequest) -> RunResponse:
        tokens = _compile(payload)
        machine = BrainfuckMachine(payload.tape_size)
        output = _execute(machine, tokens, payload.input)
        logger.debug("one-shot run of %d tokens wrote %d bytes", len(tokens), len(output))
        return _run_response(output, tokens, _build_state(machine, window=payload.tape_window))

    @app.post("/api/machine", response_model=MachineState, status_code=status.HTTP_201_CREATED)
    def create_machine(payload: MachineConfiguration) -> MachineState:
        record = machine_store.create_machine(capacity=payload.tape_size)
        logger.debug("created machine %s with %d cells", record.machine_id, payload.tape_size)
        return _record_state(record)

    @app.get("/api/machine/{machine_id}", response_model=MachineState)
    def get_machine(machine_id: str, tape_window: int = 10) -> MachineState:
        if tape_window < 0:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="tape_window must be non-negative",
            )
        record = _get_record(machine_id)
        with record.lock:
            return _record_state(record, tape_window)

    @app.post("/api/machine/{machine_id}/run", response_model=RunResponse)
    def run_on_machine(machine_id: str, payload: ProgramRequest) -> RunResponse:
        record = _get_record(machine_id)
        tokens = _compile(payload)
        with record.lock:
            try:
                output = _execute(record.machine, tokens, payload.input)
            finally:
                record.runs += 1
            state = _record_state(record, payload.tape_window)
        return _run_response(output, tokens, state)

    @app.post("/api/machine/{machine_id}/reset", response_model=MachineState)
    def reset_machine(machine_id: str) -> MachineState:
        record = _get_record(machine_id)
        with record.lock:
            machine_store.reset(machine_id)
            return _record_state(record)

    @app.delete("/api/machine/{machine_id}", status_code=status.HTTP_204_NO_CONTENT)
    def delete_machine(machine_id: str) -> Response:
        removed = machine_store.remove(machine_id)
        if not removed:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Unknown machine id: {machine_id}",
            )
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return app


__all__ = ["create_app"]
