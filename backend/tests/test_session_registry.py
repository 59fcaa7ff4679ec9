import time

from interview_sim.session.registry import SessionRegistry


def test_session_registry_register_touch_inactive_cleanup():
    registry = SessionRegistry()

    registry.register("s1", controller=object(), frame_source=None)
    item = registry.get("s1")
    assert item is not None
    assert item["active"] is True

    before_touch = float(item["updated_at"])
    time.sleep(0.01)
    registry.touch("s1")
    after_touch = float(registry.get("s1")["updated_at"])
    assert after_touch >= before_touch

    registry.mark_inactive("s1")
    assert registry.get("s1")["active"] is False

    # ttl=0 clamps internally to >=30s; force old timestamp for deterministic cleanup
    registry._sessions["s1"]["updated_at"] = time.time() - 3600
    removed = registry.cleanup_inactive(ttl_sec=0)
    assert removed == 1
    assert registry.get("s1") is None


def test_session_registry_keeps_active_sessions():
    registry = SessionRegistry()
    registry.register("live", controller=object())
    registry._sessions["live"]["updated_at"] = time.time() - 3600

    assert registry.cleanup_inactive(ttl_sec=60) == 0
    assert [session_id for session_id, _ in registry.items()] == ["live"]
    assert len(registry) == 1

    assert registry.remove("live") is not None
    assert registry.get("live") is None
