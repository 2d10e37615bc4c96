from dataclasses import replace

import pytest

from conftest import FakeMatrixClient, MailingAddress, ok_cell
from distmatrix.core.config import get_matrix_defaults
from distmatrix.core.models import Address, TransportationMode
from distmatrix.google.dm_common import CapacityExceeded, InvalidMode
from distmatrix.matrix.service import DistanceMatrixService


def _entities(prefix, n, start_id=1):
    return [MailingAddress(f"{prefix} {i}", start_id + i) for i in range(n)]


@pytest.fixture
def service(fake_client, cfg):
    return DistanceMatrixService(fake_client, cfg=cfg)


def test_many_strings_to_one_destination(service, fake_client):
    results = service.distances_from_addresses(["A", "BB", "CCC"], "Depot", TransportationMode.DRIVING)

    assert len(fake_client.requests) == 1
    assert [r.origin_address for r in results] == ["A", "BB", "CCC"]
    assert all(r.destination_address == "Depot" for r in results)
    assert all(r.origin_address_id is None for r in results)
    assert all(r.mode is TransportationMode.DRIVING for r in results)


def test_one_to_one(service, fake_client):
    results = service.distance_between("Here", "There", TransportationMode.WALKING)

    assert len(results) == 1
    assert results[0].succeeded
    assert fake_client.requests[0].params["mode"] == "walking"


def test_entities_to_string_carry_origin_ids(service):
    origins = _entities("Origin", 3, start_id=40)
    results = service.distances_from_entities(origins, "Depot", TransportationMode.BICYCLING)

    assert [r.origin_address_id for r in results] == [40, 41, 42]
    assert all(r.destination_address_id is None for r in results)


def test_entities_to_entity_carry_both_ids(service):
    origins = _entities("Origin", 2)
    depot = MailingAddress("Depot", 99)
    results = service.distances_to_entity(origins, depot, TransportationMode.DRIVING)

    assert [(r.origin_address_id, r.destination_address_id) for r in results] == [(1, 99), (2, 99)]


def test_single_destination_path_does_not_batch(service):
    with pytest.raises(CapacityExceeded):
        service.distances_from_addresses([f"o{i}" for i in range(101)], "Depot", TransportationMode.DRIVING)


def test_unknown_mode_raises_before_any_call(service, fake_client):
    with pytest.raises(InvalidMode):
        service.distance_between("A", "B", TransportationMode.UNKNOWN)
    with pytest.raises(InvalidMode):
        service.distance_matrix(_entities("o", 2), [], TransportationMode.UNKNOWN)
    assert fake_client.requests == []


def test_matrix_with_no_destinations_issues_no_call(service, fake_client):
    assert service.distance_matrix(_entities("o", 3), [], TransportationMode.DRIVING) == []
    assert fake_client.requests == []


def test_matrix_thirty_destinations_two_calls_order_preserved(service, fake_client):
    origin = _entities("Origin", 1)
    dests = _entities("Dest", 30, start_id=100)

    results = service.distance_matrix(origin, dests, TransportationMode.DRIVING)

    assert len(fake_client.requests) == 2
    assert len(fake_client.requests[0].destinations) == 25
    assert len(fake_client.requests[1].destinations) == 5
    assert len(results) == 30
    assert results[24].destination_address == "Dest 24"
    assert results[24].destination_address_id == 124
    assert results[25].destination_address == "Dest 25"
    assert results[25].destination_address_id == 125


def test_matrix_many_origins_is_origin_major_across_batches(service, fake_client):
    origins = _entities("Origin", 6)
    dests = _entities("Dest", 30, start_id=100)

    results = service.distance_matrix(origins, dests, TransportationMode.DRIVING)

    assert all(r.n_elements <= 100 for r in fake_client.requests)
    assert len(results) == 6 * 30
    expected = [(o.full_address, d.full_address) for o in origins for d in dests]
    assert [(r.origin_address, r.destination_address) for r in results] == expected


def test_matrix_per_pair_failures_do_not_abort(cfg):
    def cell_for(origin, destination):
        if destination == "Dest 26":
            return {"status": "NOT_FOUND"}
        return ok_cell(2500, 120)

    client = FakeMatrixClient(cell_for)
    service = DistanceMatrixService(client, cfg=cfg)

    results = service.distance_matrix(
        _entities("Origin", 2), _entities("Dest", 28), TransportationMode.TRANSIT
    )

    failed = [i for i, r in enumerate(results) if not r.succeeded]
    assert failed == [26, 28 + 26]
    assert results[26].error_code == "NOT_FOUND"
    assert results[26].mode is TransportationMode.UNKNOWN
    assert all(r.mode is TransportationMode.TRANSIT for r in results if r.succeeded)
    assert all("departure_time" in req.params for req in client.requests)


def test_parallel_batches_keep_order(fake_client, cfg):
    defaults = replace(get_matrix_defaults(), max_workers=4)
    service = DistanceMatrixService(fake_client, cfg=cfg, defaults=defaults)
    origins = _entities("Origin", 9)
    dests = _entities("Dest", 60, start_id=100)

    results = service.distance_matrix(origins, dests, TransportationMode.DRIVING)

    expected = [(o.id, d.id) for o in origins for d in dests]
    assert [(r.origin_address_id, r.destination_address_id) for r in results] == expected


def test_calculate_accepts_normalized_addresses(service):
    results = service.calculate(
        [Address("A", 1)], [Address("B", 2), Address("C")], TransportationMode.ALL, batched=True
    )

    assert [r.destination_address_id for r in results] == [2, None]
    assert all(r.mode is TransportationMode.ALL for r in results)


def test_service_needs_credentials(cfg):
    with pytest.raises(ValueError):
        DistanceMatrixService(FakeMatrixClient())

    client = FakeMatrixClient()
    client.cfg = cfg
    assert DistanceMatrixService(client).cfg is cfg


def test_batched_transit_shares_one_default_departure(monkeypatch, service, fake_client):
    from datetime import datetime

    from distmatrix.matrix import service as service_module

    departures = iter([datetime(2030, 5, 6, 15, 0), datetime(2030, 5, 13, 15, 0)])
    monkeypatch.setattr(
        service_module, "default_transit_departure", lambda defaults=None: next(departures)
    )

    service.distance_matrix(_entities("Origin", 1), _entities("Dest", 30), TransportationMode.TRANSIT)

    sent = {req.params["departure_time"] for req in fake_client.requests}
    assert len(fake_client.requests) == 2
    assert sent == {int(datetime(2030, 5, 6, 15, 0).timestamp())}
