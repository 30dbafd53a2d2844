"""
Snapshots, stores and the background saver.
"""
import gzip
import json

import pytest

from rugsim.engine import GameEngine, GameState
from rugsim.persistence import (
    GameSnapshot,
    JsonFileStore,
    MemoryStore,
    PersistenceError,
    PersistenceWorker,
    SnapshotStore,
)


class FailingStore(SnapshotStore):
    def save(self, snapshot):
        raise PersistenceError("disk full")

    def load(self):
        return None

    def clear(self):
        pass


def make_engine(make_asset, config, persistence=None):
    return GameEngine(GameState.new([make_asset()], 1, config), config, persistence=persistence)


@pytest.mark.parametrize('name', ['game.json', 'game.json.gz'])
def test_file_store_round_trip(tmp_path, name):
    store = JsonFileStore(tmp_path / 'saves' / name)
    snapshot = GameSnapshot(state={'clock': {'tick': 7}, 'x': [1.5, None]})

    assert store.load() is None
    store.save(snapshot)
    loaded = store.load()

    assert loaded.tick == 7
    assert loaded.state == snapshot.state
    assert loaded.saved_at == snapshot.saved_at
    assert not (tmp_path / 'saves' / (name + '.tmp')).exists()

    store.clear()
    assert store.load() is None
    store.clear()


def test_gz_store_is_compressed(tmp_path):
    path = tmp_path / 'game.json.gz'
    JsonFileStore(path).save(GameSnapshot(state={'clock': {'tick': 1}}))

    with gzip.open(path, 'rt', encoding='utf-8') as f:
        data = json.load(f)
    assert data['state']['clock']['tick'] == 1


def test_corrupt_or_foreign_snapshot_is_rejected(tmp_path):
    path = tmp_path / 'game.json'
    path.write_text('{not json', encoding='utf-8')
    with pytest.raises(PersistenceError):
        JsonFileStore(path).load()

    path.write_text(json.dumps({'version': 99, 'state': {}}), encoding='utf-8')
    with pytest.raises(PersistenceError):
        JsonFileStore(path).load()


def test_unwritable_path_raises_persistence_error(tmp_path):
    blocker = tmp_path / 'file'
    blocker.write_text('x', encoding='utf-8')

    with pytest.raises(PersistenceError):
        JsonFileStore(blocker / 'game.json').save(GameSnapshot(state={}))


def test_worker_saves_latest_state(make_asset, quiet_config):
    store = MemoryStore()
    worker = PersistenceWorker(store)
    engine = make_engine(make_asset, quiet_config, persistence=worker)

    for _ in range(3):
        engine.advance_tick()
    worker.close()

    assert store.load().tick == 3
    assert worker.saved + worker.skipped == 3
    assert worker.errors == []


def test_failed_saves_do_not_stop_the_game(make_asset, quiet_config):
    reported = []
    worker = PersistenceWorker(FailingStore(), on_error=reported.append)
    engine = make_engine(make_asset, quiet_config, persistence=worker)

    for _ in range(5):
        engine.advance_tick()
    worker.close()

    assert engine.tick == 5
    assert len(reported) >= 1
    assert reported == worker.errors
    assert all(isinstance(e, PersistenceError) for e in reported)


def test_snapshot_restores_full_state(make_asset, quiet_config):
    engine = make_engine(make_asset, quiet_config)
    engine.create_post('meme', 'coin', 'gm')
    for _ in range(5):
        engine.advance_tick()

    snapshot = GameSnapshot.from_json(engine.snapshot().to_json())
    restored = GameEngine.from_snapshot(snapshot, quiet_config)

    assert restored.state.to_dict() == engine.state.to_dict()


class BrokenStore(FailingStore):
    def save(self, snapshot):
        raise OSError("disk yanked")


def test_unexpected_store_errors_are_reported(make_asset, quiet_config, caplog):
    reported = []
    worker = PersistenceWorker(BrokenStore(), on_error=reported.append)
    engine = make_engine(make_asset, quiet_config, persistence=worker)

    with caplog.at_level('ERROR', logger='rugsim.persistence'):
        for _ in range(3):
            engine.advance_tick()
        worker.close()

    assert engine.tick == 3
    assert len(reported) >= 1
    assert reported == worker.errors
    assert all(isinstance(e, PersistenceError) for e in reported)
    assert isinstance(reported[0].__cause__, OSError)
    assert 'disk yanked' in str(reported[0])
    assert any('Snapshot save failed' in r.getMessage() for r in caplog.records)
