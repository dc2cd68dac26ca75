"""CRUD Engine tests - every operation against a real SQLite database.

Tests cover:
    - List: range filters + sort + pagination envelope, projection, deleted visibility
    - Count agrees with List's total for the same filters
    - Create/Get round trip, protected and unknown fields ignored
    - Update: patch semantics, empty patch, soft-deleted rows untouched
    - Soft delete / restore / hard delete state machine
    - Bulk create keeps input order and is all-or-nothing
"""

import pytest

from app.core.errors import DatabaseError, FieldValueError, FilterValueError


# 12 of these 20 satisfy 18 <= age < 65
AGES = [70, 25, 30, 10, 45, 64, 65, 18, 17, 33, 90, 40, 22, 5, 50, 61, 80, 19, 28, 100]


# -- List ---------------------------------------------------------------------

async def test_list_filters_sorts_and_paginates(people, seed_people):
    ids = await seed_people([{"age": a} for a in AGES])
    matching = [pid for pid, age in zip(ids, AGES) if 18 <= age < 65]
    assert len(matching) == 12
    newest_first = list(reversed(matching))

    result = await people.list_records({
        "age_gte": "18", "age_lt": "65", "sort": "desc_created_at",
        "page": "2", "limit": "5",
    })

    assert [r["id"] for r in result.data] == newest_first[5:10]
    assert result.pagination.to_dict() == {
        "page": 2, "limit": 5, "total": 12,
        "totalPages": 3, "hasNext": True, "hasPrev": True,
    }


async def test_list_defaults_to_newest_first(people, seed_people):
    ids = await seed_people([{}, {}, {}])
    result = await people.list_records({})
    assert [r["id"] for r in result.data] == list(reversed(ids))
    assert result.pagination.limit == 10


async def test_list_sort_by_multiple_keys(people, seed_people):
    await seed_people([
        {"id": "a", "age": 30, "name": "Zed"},
        {"id": "b", "age": 30, "name": "Amy"},
        {"id": "c", "age": 25, "name": "Bob"},
    ])
    result = await people.list_records({"sort": "desc_age,name"})
    assert [r["id"] for r in result.data] == ["b", "a", "c"]


async def test_list_projection(people, seed_people):
    await seed_people([{"name": "Ann"}])
    result = await people.list_records({"select": "name,unknownfield"})
    assert result.data == [{"name": "Ann"}]


async def test_list_in_filter(people, seed_people):
    await seed_people([{"id": "a", "age": 18}, {"id": "b", "age": 21}, {"id": "c", "age": 40}])
    result = await people.list_records({"age_in": ["18", "21"], "sort": "id"})
    assert [r["id"] for r in result.data] == ["a", "b"]


async def test_list_ignores_unknown_filter_fields(people, seed_people):
    await seed_people([{}, {}])
    result = await people.list_records({"nonexistent": "x"})
    assert result.pagination.total == 2


async def test_list_rejects_uncoercible_filter(people):
    with pytest.raises(FilterValueError):
        await people.list_records({"age": "abc"})


async def test_list_past_the_end_is_empty(people, seed_people):
    await seed_people([{}, {}, {}])
    result = await people.list_records({"page": "5", "limit": "2"})
    assert result.data == []
    assert result.pagination.total == 3
    assert result.pagination.has_next is False


async def test_count_matches_list_total(people, seed_people):
    await seed_people([{"age": a} for a in AGES])
    params = {"age_gte": "18", "age_lt": "65"}
    listed = await people.list_records(params)
    assert await people.count(params) == listed.pagination.total == 12


# -- Create / Get -------------------------------------------------------------

async def test_create_then_get(people):
    created = await people.create({"name": "Ann", "age": 31, "data": {"tier": "gold"}})
    assert len(created["id"]) == 32
    assert isinstance(created["wid"], int)
    assert created["created_at"] is not None
    assert created["deleted_at"] is None

    fetched = await people.get_by_id(created["id"])
    assert fetched["name"] == "Ann"
    assert fetched["age"] == 31
    assert fetched["data"] == {"tier": "gold"}


async def test_create_defaults_data_to_empty_object(people):
    created = await people.create({"name": "Bob"})
    assert created["data"] == {}


async def test_create_ignores_protected_and_unknown_fields(people):
    created = await people.create({
        "name": "Eve", "id": "chosen", "wid": 999,
        "deleted_at": "2020-01-01T00:00:00Z", "bogus": 1,
    })
    assert created["id"] != "chosen"
    assert created["wid"] != 999
    assert created["deleted_at"] is None
    assert "bogus" not in created


async def test_get_missing_returns_none(people):
    assert await people.get_by_id("nope") is None


# -- Update -------------------------------------------------------------------

async def test_update_patches_only_given_fields(people):
    created = await people.create({"name": "Ann", "age": 31, "email": "ann@x.io"})
    updated = await people.update(created["id"], {"age": 32, "id": "hijack"})
    assert updated["id"] == created["id"]
    assert updated["age"] == 32
    assert updated["email"] == "ann@x.io"
    assert updated["name"] == "Ann"


async def test_update_with_nothing_writable_returns_current(people):
    created = await people.create({"name": "Ann"})
    same = await people.update(created["id"], {"wid": 5, "unknown": "x"})
    assert same["id"] == created["id"]
    assert same["name"] == "Ann"


async def test_update_missing_returns_none(people):
    assert await people.update("nope", {"name": "x"}) is None


# -- Soft delete / restore / hard delete --------------------------------------

async def test_soft_delete_hides_record(people):
    created = await people.create({"name": "Ann"})
    assert await people.soft_delete(created["id"]) is True

    assert await people.get_by_id(created["id"]) is None
    hidden = await people.get_by_id(created["id"], include_deleted=True)
    assert hidden["deleted_at"] is not None

    assert (await people.list_records({})).data == []
    with_deleted = await people.list_records({"deleted": "true"})
    assert [r["id"] for r in with_deleted.data] == [created["id"]]
    assert await people.count({}) == 0


async def test_soft_deleted_record_cannot_be_updated_or_deleted_again(people):
    created = await people.create({"name": "Ann"})
    await people.soft_delete(created["id"])
    assert await people.update(created["id"], {"name": "Changed"}) is None
    assert await people.soft_delete(created["id"]) is False
    hidden = await people.get_by_id(created["id"], include_deleted=True)
    assert hidden["name"] == "Ann"


async def test_restore_round_trip(people):
    created = await people.create({"name": "Ann"})
    assert await people.restore(created["id"]) is None

    await people.soft_delete(created["id"])
    restored = await people.restore(created["id"])
    assert restored["deleted_at"] is None
    assert restored["name"] == "Ann"
    assert (await people.get_by_id(created["id"]))["id"] == created["id"]
    assert await people.restore(created["id"]) is None


async def test_hard_delete_removes_live_or_deleted(people):
    live = await people.create({"name": "Live"})
    gone = await people.create({"name": "Gone"})
    await people.soft_delete(gone["id"])

    assert await people.hard_delete(live["id"]) is True
    assert await people.hard_delete(gone["id"]) is True
    assert await people.hard_delete(live["id"]) is False
    assert await people.get_by_id(gone["id"], include_deleted=True) is None


# -- Bulk ---------------------------------------------------------------------

async def test_bulk_create_keeps_order(people):
    created = await people.bulk_create([
        {"name": "first", "age": 1}, {"name": "second", "age": 2}, {"name": "third", "age": 3},
    ])
    assert [r["name"] for r in created] == ["first", "second", "third"]
    assert len({r["id"] for r in created}) == 3
    assert await people.count({}) == 3


async def test_bulk_create_empty_is_noop(people):
    assert await people.bulk_create([]) == []


async def test_bulk_create_is_all_or_nothing(people, seed_people):
    await seed_people([{"id": "taken"}])
    ids = iter(["fresh", "taken"])
    people._id_factory = lambda: next(ids)

    with pytest.raises(DatabaseError):
        await people.bulk_create([{"name": "a"}, {"name": "b"}])

    assert await people.get_by_id("fresh") is None
    assert await people.count({}) == 1


# -- Out-of-range input -------------------------------------------------------

async def test_huge_page_reads_an_empty_page(people, seed_people):
    await seed_people([{}, {}])
    result = await people.list_records({"page": str(10**19)})
    assert result.data == []
    assert result.pagination.total == 2
    assert result.pagination.has_next is False


async def test_huge_integer_filter_is_rejected(people, seed_people):
    await seed_people([{"age": 30}])
    with pytest.raises(FilterValueError):
        await people.list_records({"age": "9" * 30})
    with pytest.raises(FilterValueError):
        await people.count({"age_in": ["1", "9" * 30]})


# -- deleted_at through update ------------------------------------------------

async def test_update_can_set_deleted_at(people):
    created = await people.create({"name": "Ann"})
    updated = await people.update(created["id"], {"deleted_at": "2020-01-01T00:00:00+00:00"})

    assert updated["deleted_at"] is not None
    assert updated["deleted_at"].year == 2020
    assert await people.get_by_id(created["id"]) is None
    restored = await people.restore(created["id"])
    assert restored["deleted_at"] is None


async def test_update_rejects_unparsable_timestamp(people):
    created = await people.create({"name": "Ann"})
    with pytest.raises(FieldValueError):
        await people.update(created["id"], {"deleted_at": "last tuesday"})
    assert (await people.get_by_id(created["id"]))["deleted_at"] is None


async def test_count_includes_soft_deleted_when_requested(people):
    await people.create({"name": "Keep"})
    gone = await people.create({"name": "Gone"})
    await people.soft_delete(gone["id"])

    assert await people.count({}) == 1
    assert await people.count({"deleted": "true"}) == 2
    assert await people.count({"deleted": "true", "name": "Gone"}) == 1
