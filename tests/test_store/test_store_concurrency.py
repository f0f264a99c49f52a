import os
import random
import shutil
import tempfile
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path

from companydir.core import Company, NotFoundError
from companydir.storage import CompanyStore, RECORD_SIZE


def make_company(i: int, generation: int = 0) -> Company:
    inn = str(100000000000 + i)
    return Company(
        inn=inn,
        name=f"Company {inn}",
        phone=f"+7 900 {i:07d}",
        address=f"Street {i} gen {generation}",
        individual=f"Director {i}",
    )


class TestCompanyStoreConcurrency:
    """Concurrent add/delete/list against a single store."""

    def setup_method(self):
        self.temp_dir = tempfile.mkdtemp()
        self.path = os.path.join(self.temp_dir, "companies.csv")
        self.store = CompanyStore.open(self.path, truncate=True)

    def teardown_method(self):
        self.store.close()
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_concurrent_adds_of_distinct_companies(self):
        num_workers = 8
        per_worker = 50

        def add_range(worker):
            for i in range(worker * per_worker, (worker + 1) * per_worker):
                self.store.add(make_company(i))

        with ThreadPoolExecutor(max_workers=num_workers) as executor:
            futures = [executor.submit(add_range, w) for w in range(num_workers)]
            for future in as_completed(futures):
                future.result()

        companies = self.store.list()
        assert len(companies) == num_workers * per_worker
        assert len({c.inn for c in companies}) == num_workers * per_worker
        assert Path(self.path).stat().st_size == num_workers * per_worker * RECORD_SIZE
        assert self.store.is_consistent()

    def test_mixed_operations_leave_index_consistent(self):
        num_workers = 8
        operations_per_worker = 200
        key_space = 60
        list_lengths = []
        lengths_lock = threading.Lock()

        def worker(seed):
            rng = random.Random(seed)
            for generation in range(operations_per_worker):
                i = rng.randrange(key_space)
                action = rng.random()
                if action < 0.5:
                    self.store.add(make_company(i, generation))
                elif action < 0.85:
                    try:
                        self.store.delete(inn=make_company(i).inn)
                    except NotFoundError:
                        pass
                else:
                    companies = self.store.list()
                    with lengths_lock:
                        list_lengths.append(len(companies))
                    # A listing is never torn: no duplicated keys.
                    assert len({c.inn for c in companies}) == len(companies)

        with ThreadPoolExecutor(max_workers=num_workers) as executor:
            futures = [executor.submit(worker, seed) for seed in range(num_workers)]
            for future in as_completed(futures):
                future.result()

        assert self.store.is_consistent()
        live = len(self.store)
        assert Path(self.path).stat().st_size == live * RECORD_SIZE
        assert len(self.store.list()) == live
        assert all(0 <= n <= key_space for n in list_lengths)

        self.store.close()
        self.store = CompanyStore.open(self.path)
        assert len(self.store) == live
        assert self.store.is_consistent()

    def test_close_waits_for_in_flight_operation(self):
        for i in range(10):
            self.store.add(make_company(i))

        started = threading.Event()
        release = threading.Event()
        original_flush = self.store._byte_store.flush

        def slow_flush():
            started.set()
            release.wait(timeout=5)
            original_flush()

        self.store._byte_store.flush = slow_flush

        adder = threading.Thread(target=self.store.add, args=(make_company(10),))
        adder.start()
        assert started.wait(timeout=5)

        closer = threading.Thread(target=self.store.close)
        closer.start()
        closer.join(timeout=0.2)
        assert closer.is_alive()

        release.set()
        adder.join(timeout=5)
        closer.join(timeout=5)
        assert not closer.is_alive()
        assert self.store.closed
        assert Path(self.path).stat().st_size == 11 * RECORD_SIZE
