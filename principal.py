"""
Logbook LINE - workout logging bot for LINE
Receives LINE webhook events and records workouts and sets through a
multi-turn conversation.
"""

import logging

import uvicorn
from fastapi import FastAPI, HTTPException
from supabase import create_client

from api import webhook
from config import settings
from infrastructure.line import LineClient
from infrastructure.logging import CorrelationIdMiddleware, configure_logging
from infrastructure.persistence import (
    ActiveWorkoutStore,
    ConversationStateStore,
    ExerciseRepositorySupabase,
    MemoryClient,
    RedisClient,
    UserRepositorySupabase,
    WorkoutRepositorySupabase,
    WorkoutSetRepositorySupabase,
)
from services import DialogueOrchestrator, LineIdentityResolver, ReplyComposer
from state_machine import StateMachineEngine

# Configure logging
configure_logging(
    level=settings.log_level,
    json_output=settings.log_format == "json",
    service_name="logbook-line",
)
logger = logging.getLogger(__name__)

# Initialize FastAPI
app = FastAPI(
    title="Logbook LINE",
    description="LINE webhook for logging workouts and sets",
    version="1.0.0",
)
app.add_middleware(CorrelationIdMiddleware)

# Key-value backend for conversation state
if settings.state_backend == "memory":
    kv_client = MemoryClient()
else:
    kv_client = RedisClient(settings.redis_url)

# Supabase client for the domain tables
supabase = (
    create_client(settings.supabase_url, settings.supabase_service_key)
    if (settings.supabase_url and settings.supabase_service_key)
    else None
)
if supabase is None:
    logger.warning("⚠️ Supabase not configured: domain calls will fail")

# ============================================================================
# SERVICES AND REPOSITORIES
# ============================================================================

line_client = LineClient(
    access_token=settings.line_channel_access_token,
    base_url=settings.line_api_base_url,
    timeout=settings.line_http_timeout_seconds,
)

conversation_store = ConversationStateStore(
    kv_client,
    ttl_seconds=settings.conversation_ttl_seconds,
    key_prefix=settings.conversation_key_prefix,
)
active_workout_store = ActiveWorkoutStore(
    kv_client, ttl_seconds=settings.active_workout_ttl_seconds
)

supabase_options = {
    "timeout_seconds": settings.supabase_timeout_seconds,
    "slow_query_ms": settings.supabase_slow_query_ms,
}
workout_repository = WorkoutRepositorySupabase(supabase, **supabase_options)
exercise_repository = ExerciseRepositorySupabase(supabase, **supabase_options)
set_repository = WorkoutSetRepositorySupabase(
    supabase, workout_repository, exercise_repository, **supabase_options
)
identity_resolver = LineIdentityResolver(
    UserRepositorySupabase(supabase, **supabase_options),
    line_client=line_client,
)

engine = StateMachineEngine(min_exercise_id_length=settings.min_exercise_id_length)
orchestrator = DialogueOrchestrator(
    store=conversation_store,
    active_workouts=active_workout_store,
    identity_resolver=identity_resolver,
    workouts=workout_repository,
    sets=set_repository,
    exercises=exercise_repository,
    engine=engine,
    composer=ReplyComposer(min_exercise_id_length=settings.min_exercise_id_length),
    workout_source=settings.workout_source,
    verify_exercise_exists=settings.verify_exercise_exists,
    serialize_per_user=settings.serialize_per_user,
)

webhook.configure(orchestrator, line_client)
app.include_router(webhook.router)


@app.on_event("startup")
async def startup_event():
    """Open connections when the service starts"""
    logger.info("🚀 Starting Logbook LINE...")
    await kv_client.connect()
    logger.info(f"✅ Logbook LINE ready (state backend: {settings.state_backend})")


@app.on_event("shutdown")
async def shutdown_event():
    """Close connections when the service stops"""
    logger.info("🔴 Stopping Logbook LINE...")
    await line_client.close()
    await kv_client.disconnect()
    logger.info("✅ Connections closed")


@app.get("/health")
async def health_check():
    """Service health check"""
    if not await kv_client.ping():
        raise HTTPException(status_code=503, detail="Service unhealthy: state backend unreachable")
    return {
        "status": "healthy",
        "state_backend": settings.state_backend,
        "service": "logbook-line",
    }


if __name__ == "__main__":
    uvicorn.run(
        "principal:app",
        host=settings.server_host,
        port=settings.server_port,
        log_level=settings.log_level.lower(),
    )
