"""
Tests for the store and the shared services.

Tests:
- Mute persistence under the legacy key
- Per-field subscriptions
- Unreadable storage
- Mute-aware cue player and announcer
"""

import json

import pytest

from ..services import (
    Announcer,
    CueKind,
    CuePlayer,
    JsonFileStorage,
    MemoryStorage,
    MUTE_KEY,
    ParticleEffect,
    PRAISE_PHRASES,
    Services,
    Store,
)


class BrokenStorage:
    def get_item(self, key):
        raise OSError("storage unavailable")

    def set_item(self, key, value):
        raise OSError("storage unavailable")


class TestStore:
    """Tests for Store."""

    def test_defaults(self, store):
        assert store.snapshot() == {
            "is_muted": False,
            "current_activity": None,
            "failure_notice": False,
        }

    def test_mute_is_read_at_startup(self):
        store = Store(MemoryStorage({MUTE_KEY: "true"}))

        assert store.is_muted

    def test_mute_is_written_on_change(self):
        storage = MemoryStorage()
        store = Store(storage)

        store.set(is_muted=True)
        assert storage.get_item(MUTE_KEY) == "true"

        store.set(is_muted=False)
        assert storage.get_item(MUTE_KEY) == "false"

    def test_mute_survives_a_restart(self, tmp_path):
        """The flag written by one process is read by the next one."""
        path = tmp_path / "state.json"
        Store(JsonFileStorage(path)).set(is_muted=True)

        assert json.loads(path.read_text())[MUTE_KEY] == "true"
        assert Store(JsonFileStorage(path)).is_muted

    def test_subscribers_see_new_and_old_value(self, store):
        seen = []
        store.subscribe("is_muted", lambda new, old: seen.append((new, old)))

        store.set(is_muted=True)

        assert seen == [(True, False)]

    def test_unchanged_field_does_not_notify(self, store):
        seen = []
        store.subscribe("current_activity", lambda new, old: seen.append(new))

        store.set(current_activity=None)
        store.set(is_muted=True)

        assert seen == []

    def test_subscribers_see_complete_state(self, store):
        """A subscriber reading the store sees every field of the same update."""
        seen = []
        store.subscribe("current_activity", lambda new, old: seen.append(store.get("failure_notice")))

        store.set(current_activity="memory_game", failure_notice=True)

        assert seen == [True]

    def test_unsubscribe(self, store):
        seen = []
        unsubscribe = store.subscribe("is_muted", lambda new, old: seen.append(new))

        unsubscribe()
        unsubscribe()
        store.set(is_muted=True)

        assert seen == []

    def test_unknown_field(self, store):
        with pytest.raises(KeyError):
            store.set(volume=3)
        with pytest.raises(KeyError):
            store.subscribe("volume", lambda new, old: None)

    def test_unreadable_storage_means_unmuted(self):
        """Storage failures never escape the store."""
        store = Store(BrokenStorage())

        assert not store.is_muted
        store.set(is_muted=True)
        assert store.is_muted

    def test_corrupt_state_file(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text("[1, 2, 3]")

        assert not Store(JsonFileStorage(path)).is_muted


class TestServices:
    """Tests for the mute-aware services."""

    def test_cue_player_follows_mute(self, store):
        played = []
        player = CuePlayer(store=store, sink=played.append)

        player.play_cue(CueKind.POP)
        store.set(is_muted=True)
        player.play_cue(CueKind.SUCCESS)
        store.set(is_muted=False)
        player.play_cue(CueKind.THUD)

        assert played == [CueKind.POP, CueKind.THUD]

    def test_cue_player_close_stops_following(self, store):
        played = []
        player = CuePlayer(store=store, sink=played.append)
        player.close()

        store.set(is_muted=True)
        player.play_cue(CueKind.POP)

        assert played == [CueKind.POP]

    def test_failing_sink_is_contained(self, store):
        def sink(kind):
            raise RuntimeError("no audio device")

        CuePlayer(store=store, sink=sink).play_cue(CueKind.POP)
        Announcer(store=store, sink=lambda text: sink(None)).speak("Bonjour")

    def test_muting_stops_speech(self, store):
        """Muting cuts the current utterance and silences the next ones."""
        spoken = []
        stops = []
        voice = Announcer(store=store, sink=spoken.append, on_stop=lambda: stops.append(True))

        voice.speak("Bonjour")
        store.set(is_muted=True)
        voice.speak("Encore")

        assert spoken == ["Bonjour"]
        assert stops == [True]
        assert voice.last_spoken is None

    def test_empty_text_is_not_spoken(self):
        spoken = []
        Announcer(sink=spoken.append).speak("")

        assert spoken == []

    def test_speak_positive(self, rng):
        spoken = []
        Announcer(sink=spoken.append, rng=rng).speak_positive()

        assert spoken[0] in PRAISE_PHRASES

    def test_burst_center(self):
        bursts = []
        effect = ParticleEffect(800, 600, sink=bursts.append)

        effect.burst_center()
        effect.burst(10, 20, -5)

        assert (bursts[0].x, bursts[0].y, bursts[0].count) == (400, 300, 50)
        assert bursts[1].count == 0

    def test_null_services_do_nothing(self):
        services = Services.null()

        services.audio.play_cue(CueKind.POP)
        services.voice.speak("Bonjour")
        services.voice.speak_positive()
        services.voice.stop()
        services.effects.burst(0, 0)
        services.effects.burst_center()

    def test_services_for_store(self, store):
        services = Services.for_store(store, width=640, height=480)

        store.set(is_muted=True)

        assert services.audio.is_muted
        assert services.voice.is_muted
        assert services.effects.width == 640
