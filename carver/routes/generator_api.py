"""
project: Carver
module: generator_api.py
License: MIT

HTTP API for stepwise dungeon generation.

Clients create a generator, then advance it a few steps at a time and redraw
from the returned snapshot (the same way the terminal viewer animates it), or
ask for a finished dungeon for a seed in one call.
"""

import hashlib
import os
import random
import threading
import uuid
from collections import OrderedDict

from flask import Blueprint, abort, current_app, jsonify, request

from carver.dungeon import DungeonGenerator, GenerationStalled, GeneratorConfig, render_rows
from carver.dungeon.config import DEFAULT_EXTRA_CONNECTOR_CHANCE, MIN_GRID_SIZE
from carver.logging_utils import get_logger

log = get_logger("carver.api")

bp_generator = Blueprint("generator", __name__)

MAX_SEED = 9223372036854775807


class _Entry:
    __slots__ = ("generator", "lock")

    def __init__(self, generator: DungeonGenerator):
        self.generator = generator
        self.lock = threading.Lock()


# In-process registry id -> generator. Oldest entries are evicted past CARVER_MAX_GENERATORS.
_generators: "OrderedDict[str, _Entry]" = OrderedDict()
_generators_lock = threading.Lock()

# Finished dungeons keyed by (seed, grid_size, room_attempts, extra_connector_chance).
_dungeon_cache = {}
_dungeon_cache_lock = threading.Lock()
_DUNGEON_CACHE_MAX = 8


def _coerce_seed(payload_seed):
    """Convert provided seed (int or str) into a bounded non-negative int."""
    if payload_seed is None:
        return random.randint(1, 1_000_000)
    if isinstance(payload_seed, bool):
        abort(400, description="seed must be an integer or string")
    if isinstance(payload_seed, int):
        return payload_seed % MAX_SEED
    if isinstance(payload_seed, str):
        s = payload_seed.strip()
        if not s:
            return random.randint(1, 1_000_000)
        if s.isdigit():
            return int(s) % MAX_SEED
        h = hashlib.sha256(s.encode("utf-8")).digest()
        return int.from_bytes(h[:8], "big") % MAX_SEED
    abort(400, description="seed must be an integer or string")


def _state_payload(gid, gen: DungeonGenerator):
    snap = gen.snapshot()
    data = snap.to_dict()
    data.update(
        {
            "id": gid,
            "done": gen.is_done,
            "rows": render_rows(snap),
            "connectors": len(gen.connectors()),
            "metrics": gen.metrics,
        }
    )
    return data


def _get_entry(gid) -> _Entry:
    with _generators_lock:
        entry = _generators.get(gid)
    if entry is None:
        abort(404, description=f"unknown generator {gid}")
    return entry


def _check_int(key, value, low, high):
    if isinstance(value, bool) or not isinstance(value, int) or not low <= value <= high:
        abort(400, description=f"{key} must be an integer in [{low}, {high}]")
    return value


def _int_field(data, key, default, low, high):
    return _check_int(key, data.get(key, default), low, high)


def _query_int(key, default, low, high):
    raw = request.args.get(key)
    if raw is None:
        return _check_int(key, default, low, high)
    try:
        value = int(raw)
    except ValueError:
        abort(400, description=f"{key} must be an integer in [{low}, {high}]")
    return _check_int(key, value, low, high)


@bp_generator.errorhandler(400)
@bp_generator.errorhandler(404)
def _json_error(e):
    return jsonify({"error": e.description}), e.code


@bp_generator.route("/api/generators", methods=["POST"])
def create_generator():
    """Create a stepwise generator.

    Body JSON (all optional):
      { "grid_size": <odd int, 9..CARVER_MAX_GRID_SIZE>, "room_attempts": <int, 1..CARVER_MAX_ROOM_ATTEMPTS>,
        "seed": <int|str|null>, "extra_connector_chance": <float 0..1> }

    Response (201): the generator state (see ``generator_state``).
    """
    data = request.get_json(silent=True) or {}
    cfg = current_app.config
    config = GeneratorConfig(
        grid_size=_int_field(data, "grid_size", cfg["CARVER_GRID_SIZE"], MIN_GRID_SIZE, cfg["CARVER_MAX_GRID_SIZE"]),
        room_attempts=_int_field(data, "room_attempts", cfg["CARVER_ROOM_ATTEMPTS"], 1, cfg["CARVER_MAX_ROOM_ATTEMPTS"]),
        seed=_coerce_seed(data.get("seed")),
        extra_connector_chance=data.get("extra_connector_chance", cfg["CARVER_EXTRA_CONNECTOR_CHANCE"]),
    )
    gen = DungeonGenerator(config)
    gid = uuid.uuid4().hex
    with _generators_lock:
        _generators[gid] = _Entry(gen)
        while len(_generators) > cfg["CARVER_MAX_GENERATORS"]:
            evicted, _ = _generators.popitem(last=False)
            log.info(event="generator_evicted", id=evicted)
    log.info(event="generator_created", id=gid, seed=gen.seed, grid_size=gen.grid_size)
    return jsonify(_state_payload(gid, gen)), 201


@bp_generator.route("/api/generators/<gid>")
def generator_state(gid):
    """Return phase, rooms, maze, main region, text rows and metrics for a generator."""
    entry = _get_entry(gid)
    with entry.lock:
        return jsonify(_state_payload(gid, entry.generator))


@bp_generator.route("/api/generators/<gid>/step", methods=["POST"])
def step_generator(gid):
    """Advance a generator. Body: { "count": <int, default 1> }. Stepping a finished generator is a no-op."""
    data = request.get_json(silent=True) or {}
    count = _int_field(data, "count", 1, 1, current_app.config["CARVER_MAX_STEPS"])
    entry = _get_entry(gid)
    with entry.lock:
        gen = entry.generator
        for _ in range(count):
            if gen.is_done:
                break
            gen.step()
        return jsonify(_state_payload(gid, gen))


@bp_generator.route("/api/generators/<gid>/run", methods=["POST"])
def run_generator(gid):
    """Step until done. Body: { "max_steps": <int> } (default CARVER_MAX_STEPS); 409 if it stalls."""
    data = request.get_json(silent=True) or {}
    ceiling = current_app.config["CARVER_MAX_STEPS"]
    max_steps = _int_field(data, "max_steps", ceiling, 1, ceiling)
    entry = _get_entry(gid)
    with entry.lock:
        gen = entry.generator
        try:
            gen.run(max_steps=max_steps)
        except GenerationStalled as exc:
            payload = _state_payload(gid, gen)
            payload["error"] = str(exc)
            return jsonify(payload), 409
        return jsonify(_state_payload(gid, gen))


@bp_generator.route("/api/generators/<gid>/reset", methods=["POST"])
def reset_generator(gid):
    entry = _get_entry(gid)
    with entry.lock:
        entry.generator.reset()
        return jsonify(_state_payload(gid, entry.generator))


@bp_generator.route("/api/generators/<gid>", methods=["DELETE"])
def delete_generator(gid):
    with _generators_lock:
        entry = _generators.pop(gid, None)
    if entry is None:
        abort(404, description=f"unknown generator {gid}")
    return jsonify({"deleted": gid})


def get_cached_dungeon(
    seed: int,
    grid_size: int,
    room_attempts: int,
    extra_connector_chance: float = DEFAULT_EXTRA_CONNECTOR_CHANCE,
) -> DungeonGenerator:
    """Return a finished generator for these settings, generating it on a cache miss."""
    config = GeneratorConfig(
        grid_size=grid_size,
        room_attempts=room_attempts,
        seed=seed,
        extra_connector_chance=extra_connector_chance,
    )
    if os.environ.get("CARVER_DISABLE_CACHE") == "1":
        gen = DungeonGenerator(config)
        gen.run()
        return gen
    key = (seed, grid_size, room_attempts, extra_connector_chance)
    with _dungeon_cache_lock:
        gen = _dungeon_cache.get(key)
    if gen is not None:
        return gen
    gen = DungeonGenerator(config)
    gen.run()
    with _dungeon_cache_lock:
        _dungeon_cache[key] = gen
        if len(_dungeon_cache) > _DUNGEON_CACHE_MAX:
            first_key = next(iter(_dungeon_cache.keys()))
            if first_key != key:
                _dungeon_cache.pop(first_key, None)
    return gen


@bp_generator.route("/api/dungeon")
def finished_dungeon():
    """Generate (or fetch from cache) a complete dungeon.

    Query params: seed (int or string, random if omitted), grid_size, room_attempts.
    """
    cfg = current_app.config
    seed = _coerce_seed(request.args.get("seed"))
    grid_size = _query_int("grid_size", cfg["CARVER_GRID_SIZE"], MIN_GRID_SIZE, cfg["CARVER_MAX_GRID_SIZE"])
    room_attempts = _query_int("room_attempts", cfg["CARVER_ROOM_ATTEMPTS"], 1, cfg["CARVER_MAX_ROOM_ATTEMPTS"])
    gen = get_cached_dungeon(seed, grid_size, room_attempts, cfg["CARVER_EXTRA_CONNECTOR_CHANCE"])
    return jsonify(_state_payload(None, gen))
