"""Endpoints de grabaciones: procesar transcripción, listar, reprocesar, estado del audio."""
from fastapi import APIRouter, Depends, status

from app.api.deps import get_current_user_id, get_recording_service, get_transcript_service
from app.api.schemas.paper import DeleteOut, PaperOut
from app.api.schemas.recording import (
    AudioStatusIn,
    AudioStatusOut,
    RecordingListOut,
    RecordingProcessIn,
    RecordingReprocessIn,
)
from app.services.recording_service import RecordingPaperService
from app.services.transcript_service import TranscriptService

router = APIRouter(prefix="/recordings", tags=["Recordings"])


@router.post("/process", status_code=status.HTTP_201_CREATED, response_model=PaperOut, summary="Procesar y guardar transcripción")
def process_recording(
    payload: RecordingProcessIn,
    user_id: str = Depends(get_current_user_id),
    svc: TranscriptService = Depends(get_transcript_service),
):
    return svc.process(
        user_id,
        payload.recordingId,
        payload.transcript,
        trigger_word=payload.triggerWord,
        duration=payload.duration,
        timestamp=payload.timestamp,
    )


@router.get("", response_model=RecordingListOut, summary="Grabaciones del usuario (más recientes primero)")
def list_recordings(
    user_id: str = Depends(get_current_user_id),
    svc: RecordingPaperService = Depends(get_recording_service),
):
    return {"recordings": svc.list_recordings(user_id)}


@router.get("/pending-sync", response_model=RecordingListOut, summary="Grabaciones con audio pendiente de subir")
def pending_sync(
    user_id: str = Depends(get_current_user_id),
    svc: RecordingPaperService = Depends(get_recording_service),
):
    return {"recordings": svc.list_pending_sync(user_id)}


@router.get("/{recording_id}", response_model=PaperOut, summary="Obtener grabación por recordingId")
def get_recording(
    recording_id: str,
    user_id: str = Depends(get_current_user_id),
    svc: RecordingPaperService = Depends(get_recording_service),
):
    return svc.get_recording(user_id, recording_id)


@router.post("/{paper_id}/reprocess", response_model=PaperOut, summary="Reprocesar con otro prompt")
def reprocess_recording(
    paper_id: str,
    payload: RecordingReprocessIn,
    user_id: str = Depends(get_current_user_id),
    svc: TranscriptService = Depends(get_transcript_service),
):
    return svc.reprocess(user_id, paper_id, payload.triggerWord)


@router.patch("/{recording_id}/audio-status", response_model=AudioStatusOut, summary="Actualizar estado del audio")
def update_audio_status(
    recording_id: str,
    payload: AudioStatusIn,
    user_id: str = Depends(get_current_user_id),
    svc: RecordingPaperService = Depends(get_recording_service),
):
    updated = svc.update_audio_status(recording_id, user_id, payload.audioSyncStatus, payload.audioUrl)
    return AudioStatusOut(updated=updated)


@router.delete("/{recording_id}", response_model=DeleteOut, summary="Eliminar grabación")
def delete_recording(
    recording_id: str,
    user_id: str = Depends(get_current_user_id),
    svc: RecordingPaperService = Depends(get_recording_service),
):
    return svc.delete_recording(user_id, recording_id)
