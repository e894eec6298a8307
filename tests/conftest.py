"""Shared test fixtures and configuration."""

import logging
import os

import pytest


# Pin every setting so a developer's .env or shell cannot change test outcomes
TEST_ENV = {
    "SEARCH_MAX_RESULTS": "50",
    "SEARCH_MAX_RESULTS_CAP": "100",
    "SEARCH_MIN_SCORE": "1",
    "FUZZY_MAX_DISTANCE": "2",
    "CONTEXT_CHARS": "100",
    "MAX_QUERY_LENGTH": "256",
    "MAX_DOCUMENTS": "0",
    "LOG_LEVEL": "info",
    "LOG_JSON": "true",
    "SERVICE_NAME": "crashlog-search-test",
}

for key, value in TEST_ENV.items():
    os.environ[key] = value

from crashlog_search.domain.model import CrashLogDocument, CrashLogFile
from crashlog_search.search.engine import CrashLogSearchEngine


FORGE_CRASH_LOG = """---- Minecraft Crash Report ----
// Why did you do that?

Time: 2024-01-15 12:00:00
Description: Ticking entity

java.lang.NullPointerException: Cannot invoke "net.minecraft.world.entity.Entity.getId()" because "entity" is null
\tat com.example.mymod.EntityHandler.onTick(EntityHandler.java:42)
\tat net.minecraftforge.eventbus.EventBus.post(EventBus.java:315)

Caused by: java.lang.IllegalStateException: Entity not registered
\tat com.example.mymod.Registry.lookup(Registry.java:17)

-- System Details --
Details:
\tMinecraft Version: 1.20.1
\tForge Version: 47.2.0
"""

FABRIC_CRASH_LOG = """[12:00:00] [main/INFO]: Loading Minecraft 1.20.4 with Fabric Loader 0.15.6
[12:00:00] [main/INFO]: Loading 4 mods:
\t- fabricloader 0.15.6
\t- java 17
\t- minecraft 1.20.4
\t- sodium 0.5.8
[12:00:01] [main/ERROR]: Mixin apply for mod sodium failed sodium.mixins.json:core.MixinFoo from mod sodium -> net.minecraft.client.Foo: org.spongepowered.asm.mixin.injection.throwables.InvalidInjectionException: Critical injection failure
"""


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Re-apply the pinned settings for every test."""
    for key, value in TEST_ENV.items():
        monkeypatch.setenv(key, value)


@pytest.fixture
def restore_root_logging():
    """Undo handler/level changes made by configure_logging."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def engine() -> CrashLogSearchEngine:
    return CrashLogSearchEngine()


@pytest.fixture
def forge_crash_log() -> str:
    return FORGE_CRASH_LOG


@pytest.fixture
def fabric_crash_log() -> str:
    return FABRIC_CRASH_LOG


@pytest.fixture
def forge_document() -> CrashLogDocument:
    return CrashLogDocument.from_upload(
        "forge-1",
        [CrashLogFile(name="crash-2024-01-15.txt", content=FORGE_CRASH_LOG)],
        title="Crash when an entity ticks",
        tags=["forge", "entity"],
    )


@pytest.fixture
def fabric_document() -> CrashLogDocument:
    return CrashLogDocument.from_upload(
        "fabric-1",
        [CrashLogFile(name="latest.log", content=FABRIC_CRASH_LOG)],
        title="Sodium mixin failure",
    )
