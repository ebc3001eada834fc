from __future__ import annotations

from fastapi import APIRouter, HTTPException, WebSocket, WebSocketDisconnect

from chiptable_backend.api.deps import table_service
from chiptable_backend.engine.errors import EngineRejectedAction, PreconditionError, ValidationError
from chiptable_backend.engine.models import (
    CreateTableRequest,
    CreateTableResponse,
    EndRoundRequest,
    JoinTableRequest,
    JoinTableResponse,
    LeaveTableRequest,
    MinRaiseResponse,
    PlayerActionRequest,
    PlayerActionResponse,
    SetActiveRequest,
    Table,
    UpdateBlindsRequest,
    UpdateChipsRequest,
    UpdatePositionsRequest,
)


router = APIRouter(prefix="/api")


def _rejected(exc: EngineRejectedAction) -> HTTPException:
    if isinstance(exc, ValidationError):
        status_code = 422
    elif exc.code == "TABLE_NOT_FOUND":
        status_code = 404
    elif exc.code == "WRITE_CONFLICT":
        status_code = 409
    else:
        status_code = 400
    return HTTPException(status_code=status_code, detail={"code": exc.code, "message": exc.message})


@router.post("/tables", response_model=CreateTableResponse)
async def create_table(request: CreateTableRequest) -> CreateTableResponse:
    try:
        return await table_service.create_table(
            request.name,
            request.small_blind,
            request.big_blind,
            request.buy_in,
        )
    except EngineRejectedAction as exc:
        raise _rejected(exc) from exc


@router.get("/tables/{table_id}", response_model=Table)
async def get_table(table_id: str) -> Table:
    try:
        return await table_service.get_table(table_id)
    except EngineRejectedAction as exc:
        raise _rejected(exc) from exc


@router.get("/tables/{table_id}/min-raise", response_model=MinRaiseResponse)
async def get_min_raise(table_id: str) -> MinRaiseResponse:
    try:
        return await table_service.get_min_raise(table_id)
    except EngineRejectedAction as exc:
        raise _rejected(exc) from exc


@router.post("/tables/{table_id}/join", response_model=JoinTableResponse)
async def join_table(table_id: str, request: JoinTableRequest) -> JoinTableResponse:
    try:
        return await table_service.join_table(table_id, request.name, request.buy_in)
    except EngineRejectedAction as exc:
        raise _rejected(exc) from exc


@router.post("/tables/{table_id}/leave", response_model=Table)
async def leave_table(table_id: str, request: LeaveTableRequest) -> Table:
    try:
        return await table_service.leave_table(table_id, request.player_id)
    except EngineRejectedAction as exc:
        raise _rejected(exc) from exc


@router.post("/tables/{table_id}/start", response_model=Table)
async def start_round(table_id: str) -> Table:
    try:
        return await table_service.start_round(table_id)
    except EngineRejectedAction as exc:
        raise _rejected(exc) from exc


@router.post("/tables/{table_id}/move-dealer", response_model=Table)
async def move_dealer(table_id: str) -> Table:
    try:
        return await table_service.move_dealer(table_id)
    except EngineRejectedAction as exc:
        raise _rejected(exc) from exc


@router.post("/tables/{table_id}/actions", response_model=PlayerActionResponse)
async def player_action(table_id: str, request: PlayerActionRequest) -> PlayerActionResponse:
    try:
        return await table_service.player_action(
            table_id,
            request.player_id,
            request.action,
            request.raise_amount,
        )
    except EngineRejectedAction as exc:
        raise _rejected(exc) from exc


@router.post("/tables/{table_id}/end", response_model=Table)
async def end_round(table_id: str, request: EndRoundRequest) -> Table:
    try:
        return await table_service.end_round(table_id, request.winner_id)
    except EngineRejectedAction as exc:
        raise _rejected(exc) from exc


@router.put("/tables/{table_id}/players/{player_id}/chips", response_model=Table)
async def update_player_chips(table_id: str, player_id: str, request: UpdateChipsRequest) -> Table:
    try:
        return await table_service.update_player_chips(table_id, player_id, request.chips)
    except EngineRejectedAction as exc:
        raise _rejected(exc) from exc


@router.put("/tables/{table_id}/players/{player_id}/active", response_model=Table)
async def set_player_active(table_id: str, player_id: str, request: SetActiveRequest) -> Table:
    try:
        return await table_service.set_player_active(table_id, player_id, request.active)
    except EngineRejectedAction as exc:
        raise _rejected(exc) from exc


@router.put("/tables/{table_id}/blinds", response_model=Table)
async def update_blinds(table_id: str, request: UpdateBlindsRequest) -> Table:
    try:
        return await table_service.update_blinds(table_id, request.small_blind, request.big_blind)
    except EngineRejectedAction as exc:
        raise _rejected(exc) from exc


@router.put("/tables/{table_id}/positions", response_model=Table)
async def update_player_positions(table_id: str, request: UpdatePositionsRequest) -> Table:
    try:
        return await table_service.update_player_positions(table_id, request.ordered_ids)
    except EngineRejectedAction as exc:
        raise _rejected(exc) from exc


@router.websocket("/ws/tables/{table_id}")
async def table_socket(websocket: WebSocket, table_id: str) -> None:
    await websocket.accept()
    try:
        queue = await table_service.subscribe(table_id)
    except PreconditionError:
        await websocket.close(code=1008)
        return

    try:
        table = await table_service.get_table(table_id)
        await websocket.send_json({"type": "TABLE_STATE", "payload": table.to_document()})
        while True:
            document = await queue.get()
            await websocket.send_json({"type": "TABLE_STATE", "payload": document})
    except WebSocketDisconnect:
        pass
    finally:
        await table_service.unsubscribe(table_id, queue)
