"""
Test suite for catalog loading and the catalog lifecycle.
"""

import json
import logging
import threading
import time

import numpy as np
import pytest

from additive_lens.catalog.loader import load_catalog, load_catalog_file
from additive_lens.catalog.models import CatalogStore
from additive_lens.catalog.service import CatalogService
from additive_lens.errors import CatalogLoadError, LoadError
from additive_lens.utils.lifecycle import GuardedLoader, LoadState
from tests.fixtures.stubs import make_record
from tests.fixtures.test_data import CATALOG_RECORDS


def _raw_record(substance="GUAR GUM", embedding=None, **overrides):
    record = {
        'substance': substance,
        'other_names': '',
        'technical_effect': 'THICKENER',
        'searchable_text': substance,
        'embedding': embedding if embedding is not None else [0.5, 0.5],
    }
    record.update(overrides)
    return record


def _document(records, dimension=2, total=None):
    return {
        'embedding_dimension': dimension,
        'total_records': len(records) if total is None else total,
        'data': records,
    }


# ============================================================================
# LOADER
# ============================================================================

class TestLoadCatalog:

    def test_loads_fixture(self, catalog):
        assert len(catalog) == len(CATALOG_RECORDS)
        assert catalog.dimension == 64
        assert [r.substance for r in catalog] == [r['substance'] for r in CATALOG_RECORDS]

    def test_record_fields(self, catalog):
        record = catalog.records[0]
        assert record.substance == 'SODIUM BENZOATE'
        assert record.technical_effect == 'ANTIMICROBIAL AGENT|PRESERVATIVE'
        assert len(record.embedding) == 64

    @pytest.mark.parametrize("raw", [[], "catalog", None])
    def test_document_not_object(self, raw):
        with pytest.raises(CatalogLoadError):
            load_catalog(raw)

    @pytest.mark.parametrize("dimension", [None, 0, -3, "64", True, 2.0])
    def test_invalid_dimension(self, dimension):
        with pytest.raises(CatalogLoadError):
            load_catalog({'embedding_dimension': dimension, 'data': []})

    def test_missing_data(self):
        with pytest.raises(CatalogLoadError):
            load_catalog({'embedding_dimension': 2, 'total_records': 0})

    def test_malformed_records_skipped(self):
        records = [
            _raw_record('GOOD ONE'),
            'not a record',
            _raw_record('NO EFFECT', technical_effect=None),
            _raw_record('SHORT', embedding=[1.0]),
            _raw_record('TEXT VALUE', embedding=[1.0, 'x']),
            _raw_record('BOOL VALUE', embedding=[True, 0.0]),
            _raw_record('GOOD TWO', embedding=[1, 0]),
        ]
        store = load_catalog(_document(records))
        assert [r.substance for r in store] == ['GOOD ONE', 'GOOD TWO']
        assert store.records[1].embedding == (1.0, 0.0)

    @pytest.mark.parametrize("value", [10 ** 400, -(10 ** 400), float("nan"), float("inf"), 1e300])
    def test_unrepresentable_values_skipped(self, value):
        records = [_raw_record('GOOD ONE'), _raw_record('HUGE', embedding=[value, 0.0])]
        store = load_catalog(_document(records))
        assert [r.substance for r in store] == ['GOOD ONE']
        assert np.isfinite(store.matrix).all()

    def test_unrepresentable_values_from_json_text(self):
        text = json.dumps(_document([_raw_record('GOOD ONE'), _raw_record('HUGE')]))
        text = text.replace('[0.5, 0.5]}]', '[1' + '0' * 400 + ', 0.5]}]')
        store = load_catalog(json.loads(text))
        assert [r.substance for r in store] == ['GOOD ONE']

    def test_all_records_invalid_gives_empty_store(self):
        store = load_catalog(_document([_raw_record(embedding=[1.0, 2.0, 3.0])]))
        assert len(store) == 0
        assert not store.is_ready()

    def test_total_records_mismatch_warns(self, caplog):
        with caplog.at_level(logging.WARNING, logger="additive_lens.catalog.loader"):
            store = load_catalog(_document([_raw_record()], total=5))
        assert len(store) == 1
        assert "declares 5 records" in caplog.text


class TestLoadCatalogFile:

    def test_round_trip(self, tmp_path, catalog_raw):
        path = tmp_path / "embeddings.json"
        path.write_text(json.dumps(catalog_raw), encoding="utf-8")
        store = load_catalog_file(path)
        assert len(store) == len(CATALOG_RECORDS)

    def test_missing_file(self, tmp_path):
        with pytest.raises(CatalogLoadError, match="not found"):
            load_catalog_file(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(CatalogLoadError):
            load_catalog_file(path)


# ============================================================================
# STORE
# ============================================================================

class TestCatalogStore:

    def test_embedding_length_checked(self):
        with pytest.raises(ValueError):
            CatalogStore([make_record('BAD', [1.0, 2.0, 3.0])], dimension=2)

    def test_negative_dimension(self):
        with pytest.raises(ValueError):
            CatalogStore([], dimension=-1)

    def test_matrix_and_norms(self, unit_catalog):
        assert unit_catalog.matrix.shape == (4, 4)
        assert unit_catalog.matrix.dtype == np.float32
        np.testing.assert_allclose(unit_catalog.norms, [1.0, 1.0, 1.0, 0.0])

    def test_matrix_is_read_only(self, unit_catalog):
        with pytest.raises(ValueError):
            unit_catalog.matrix[0, 0] = 5.0
        with pytest.raises(ValueError):
            unit_catalog.norms[0] = 5.0

    def test_empty(self):
        store = CatalogStore.empty(8)
        assert len(store) == 0
        assert store.dimension == 8
        assert store.matrix.shape == (0, 8)
        assert not store.is_ready()

    def test_find_exact_case_insensitive(self, catalog):
        assert catalog.find_exact('citric acid').substance == 'CITRIC ACID'

    def test_find_exact_alias(self, catalog):
        assert catalog.find_exact('allura red ac').substance == 'FD&C RED NO. 40'

    def test_find_exact_separate_alias_term(self, catalog):
        # substance compared with search_term, aliases with alias_term
        assert catalog.find_exact('NOTHING', alias_term='tartrazine').substance == 'FD&C YELLOW NO. 5'
        assert catalog.find_exact('tartrazine', alias_term='nothing') is None

    def test_find_exact_empty_alias_never_matches(self, catalog):
        # CITRIC ACID has no alternate names
        assert catalog.find_exact('', alias_term='') is None

    def test_find_exact_first_occurrence(self):
        store = CatalogStore([
            make_record('XANTHAN GUM', [1.0], technical_effect='FIRST'),
            make_record('XANTHAN GUM', [1.0], technical_effect='SECOND'),
        ], dimension=1)
        assert store.find_exact('xanthan gum').technical_effect == 'FIRST'

    def test_alias_list(self, catalog):
        record = catalog.find_exact('ascorbic acid')
        assert record.alias_list() == ['VITAMIN C', 'L-ASCORBIC ACID']
        assert catalog.find_exact('citric acid').alias_list() == []


# ============================================================================
# LIFECYCLE
# ============================================================================

class TestCatalogService:

    def test_requires_path_or_loader(self):
        with pytest.raises(ValueError):
            CatalogService()

    def test_initial_state(self, catalog):
        service = CatalogService(loader=lambda: catalog)
        assert service.state == LoadState.UNINITIALIZED
        assert not service.is_ready
        assert len(service.catalog) == 0

    def test_load_success(self, catalog):
        service = CatalogService(loader=lambda: catalog)
        assert service.ensure_loaded() == LoadState.READY
        assert service.is_ready
        assert service.catalog is catalog
        assert service.error is None

    def test_load_from_path(self, tmp_path, catalog_raw):
        path = tmp_path / "embeddings.json"
        path.write_text(json.dumps(catalog_raw), encoding="utf-8")
        service = CatalogService(path=path)
        assert service.ensure_loaded() == LoadState.READY
        assert len(service.catalog) == len(CATALOG_RECORDS)

    def test_missing_file_fails(self, tmp_path):
        service = CatalogService(path=tmp_path / "missing.json")
        assert service.ensure_loaded() == LoadState.FAILED
        assert isinstance(service.error, CatalogLoadError)
        assert not service.is_ready
        assert len(service.catalog) == 0

    def test_failure_not_retried(self):
        calls = []

        def loader():
            calls.append(1)
            raise CatalogLoadError("boom")

        service = CatalogService(loader=loader)
        service.ensure_loaded()
        service.ensure_loaded()
        assert service.state == LoadState.FAILED
        assert len(calls) == 1

    def test_os_error_wrapped(self):
        def loader():
            raise OSError("disk gone")

        service = CatalogService(loader=loader)
        assert service.ensure_loaded() == LoadState.FAILED
        assert isinstance(service.error, LoadError)
        assert "disk gone" in str(service.error)

    @pytest.mark.parametrize("error", [RuntimeError("bad state"), TypeError("bad loader"), RecursionError("deep")])
    def test_unexpected_error_wrapped(self, error):
        def loader():
            raise error

        service = CatalogService(loader=loader)
        assert service.ensure_loaded() == LoadState.FAILED
        assert service.state == LoadState.FAILED
        assert isinstance(service.error, LoadError)
        assert str(error) in str(service.error)
        assert not service.is_ready

    def test_overflowing_catalog_loads_remaining_records(self):
        document = _document([_raw_record('GOOD ONE'), _raw_record('HUGE', embedding=[10 ** 400, 0])])
        service = CatalogService(loader=lambda: load_catalog(document))
        assert service.ensure_loaded() == LoadState.READY
        assert [r.substance for r in service.catalog] == ['GOOD ONE']

    def test_empty_catalog_is_not_ready(self):
        service = CatalogService(loader=lambda: CatalogStore.empty(4))
        assert service.ensure_loaded() == LoadState.READY
        assert not service.is_ready

    def test_concurrent_load_runs_once(self, catalog):
        calls = []

        def slow_loader():
            calls.append(1)
            time.sleep(0.05)
            return catalog

        service = CatalogService(loader=slow_loader)
        states = []
        threads = [threading.Thread(target=lambda: states.append(service.ensure_loaded()))
                   for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(calls) == 1
        assert states == [LoadState.READY] * 8


class TestGuardedLoader:

    def test_reset_reloads(self):
        values = iter([1, 2])
        guard = GuardedLoader(lambda: next(values), name="counter")
        guard.ensure_loaded()
        assert guard.value == 1
        guard.reset()
        assert guard.state == LoadState.UNINITIALIZED
        assert guard.value is None
        guard.ensure_loaded()
        assert guard.value == 2

    def test_reset_clears_failure(self):
        outcomes = iter([CatalogLoadError("first"), "loaded"])

        def loader():
            outcome = next(outcomes)
            if isinstance(outcome, Exception):
                raise outcome
            return outcome

        guard = GuardedLoader(loader)
        assert guard.ensure_loaded() == LoadState.FAILED
        guard.reset()
        assert guard.error is None
        assert guard.ensure_loaded() == LoadState.READY
        assert guard.value == "loaded"
