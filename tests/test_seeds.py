import threading

import pytest

from fairplay.fair import sha256_hex
from fairplay.seeds import SeedPairManager, generate_client_seed, generate_server_seed


class TestGeneration:
    def test_client_seed_entropy(self):
        seed = generate_client_seed()
        assert len(seed) == 32
        int(seed, 16)
        assert seed != generate_client_seed()

    def test_server_seed_entropy(self):
        seed = generate_server_seed()
        assert len(seed) == 64
        assert seed != generate_server_seed()


class TestSeedPairManager:
    def test_public_view_hides_seed(self):
        m = SeedPairManager(client_seed="mine")
        view = m.current()
        assert view["client_seed"] == "mine"
        assert view["nonce"] == 0
        assert "server_seed" not in view
        assert len(view["server_seed_hash"]) == 64

    def test_nonce_is_gap_free(self):
        m = SeedPairManager(nonce_base=1)
        assert [m.next_nonce() for _ in range(5)] == [1, 2, 3, 4, 5]

    def test_negative_base_rejected(self):
        with pytest.raises(ValueError):
            SeedPairManager(nonce_base=-1)

    def test_rotation_reveals_committed_seed(self):
        m = SeedPairManager(client_seed="mine")
        published = m.server_seed_hash
        for _ in range(3):
            m.next_nonce()
        revealed, new_hash = m.rotate_seed()
        assert sha256_hex(revealed) == published
        assert new_hash != published
        assert m.server_seed_hash == new_hash

    def test_rotation_resets_and_freezes_nonce(self):
        m = SeedPairManager(client_seed="mine")
        for _ in range(4):
            m.next_nonce()
        m.rotate_seed()
        retired = m.history()[-1]
        assert retired.nonce == 4
        assert not retired.active
        assert m.next_nonce() == 0
        assert m.history()[-1].nonce == 4

    def test_rotation_keeps_or_replaces_client_seed(self):
        m = SeedPairManager(client_seed="first")
        m.rotate_seed()
        assert m.client_seed == "first"
        m.rotate_seed("second")
        assert m.client_seed == "second"

    def test_commit_returns_hash_only(self):
        m = SeedPairManager()
        new_hash = m.commit_server_seed()
        assert new_hash == m.server_seed_hash
        assert len(m.history()) == 1

    def test_revealed_dict(self):
        m = SeedPairManager()
        m.rotate_seed()
        rec = m.history()[0].to_revealed_dict()
        assert sha256_hex(rec["server_seed"]) == rec["server_seed_hash"]
        assert rec["revealed_at"]

    def test_active_pair_cannot_be_disclosed(self):
        m = SeedPairManager()
        _, new = m.rotate_pair()
        with pytest.raises(RuntimeError):
            new.to_revealed_dict()

    def test_reserve_is_consistent(self):
        m = SeedPairManager(client_seed="mine")
        server_seed, client_seed, nonce = m.reserve()
        assert sha256_hex(server_seed) == m.server_seed_hash
        assert client_seed == "mine"
        assert nonce == 0
        assert m.next_nonce() == 1

    def test_concurrent_nonces_are_distinct(self):
        m = SeedPairManager()
        issued = []
        lock = threading.Lock()

        def worker():
            local = [m.next_nonce() for _ in range(500)]
            with lock:
                issued.extend(local)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert sorted(issued) == list(range(4000))

    def test_no_nonce_for_revealed_seed(self):
        m = SeedPairManager()
        results = []

        def bettor():
            for _ in range(300):
                results.append(m.reserve())

        t = threading.Thread(target=bettor)
        t.start()
        revealed, _ = m.rotate_seed()
        t.join()
        retired = m.history()[-1]
        used = [n for seed, _, n in results if seed == revealed]
        assert used == list(range(len(used)))
        assert len(used) == retired.nonce
