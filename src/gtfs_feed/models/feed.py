"""In-memory relational container for a GTFS feed."""

from collections.abc import Callable, Iterable, Iterator
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from gtfs_feed.errors import DuplicateKey
from gtfs_feed.models.gtfs import (
    Agency,
    Calendar,
    CalendarDate,
    FareAttribute,
    FareRule,
    FeedInfo,
    Frequency,
    Route,
    ShapePoint,
    Stop,
    StopTime,
    Transfer,
    Trip,
)

T = TypeVar("T", bound=BaseModel)


class EntityList(Generic[T]):
    """Append-ordered sequence of entities of one kind."""

    def __init__(self, table: str, entities: Iterable[T] = ()):
        self.table = table
        self._entities: list[T] = []
        for entity in entities:
            self.add(entity)

    def add(self, entity: T) -> None:
        self._entities.append(entity)

    def extend(self, entities: Iterable[T]) -> None:
        for entity in entities:
            self.add(entity)

    def __iter__(self) -> Iterator[T]:
        return iter(self._entities)

    def __len__(self) -> int:
        return len(self._entities)

    def __getitem__(self, index: int) -> T:
        return self._entities[index]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.table!r}, {len(self)} rows)"


class KeyedCollection(EntityList[T]):
    """Entities with a unique key, in insertion order.

    Adding an entity whose key is already present raises ``DuplicateKey``;
    the existing row is kept.
    """

    def __init__(self, table: str, key: Callable[[T], str], entities: Iterable[T] = ()):
        self._key = key
        self._index: dict[str, T] = {}
        super().__init__(table, entities)

    def add(self, entity: T) -> None:
        key = self._key(entity)
        if key in self._index:
            raise DuplicateKey(self.table, key)
        self._index[key] = entity
        self._entities.append(entity)

    def get(self, key: str) -> T | None:
        return self._index.get(key)

    def keys(self) -> Iterator[str]:
        return iter(self._index)

    def __contains__(self, key: object) -> bool:
        return key in self._index

    def remove(self, key: str) -> T:
        """Remove and return the entity with the given key.

        Raises:
            KeyError: If no entity has that key.
        """
        entity = self._index.pop(key)
        self._entities = [e for e in self._entities if e is not entity]
        return entity


class GroupedCollection(EntityList[T]):
    """Entities grouped by a non-unique key.

    Rows are kept in append order; the group index is maintained on every add.
    """

    def __init__(self, table: str, group: Callable[[T], str], entities: Iterable[T] = ()):
        self._group = group
        self._groups: dict[str, list[T]] = {}
        super().__init__(table, entities)

    def add(self, entity: T) -> None:
        self._entities.append(entity)
        self._groups.setdefault(self._group(entity), []).append(entity)

    def get(self, group_key: str) -> list[T]:
        """Return the members of a group in append order (empty if unknown)."""
        return list(self._groups.get(group_key, ()))

    def group_keys(self) -> Iterator[str]:
        return iter(self._groups)

    def __contains__(self, group_key: object) -> bool:
        return group_key in self._groups

    def remove_group(self, group_key: str) -> list[T]:
        """Remove and return all members of a group."""
        members = self._groups.pop(group_key, [])
        if members:
            dropped = {id(e) for e in members}
            self._entities = [e for e in self._entities if id(e) not in dropped]
        return members


class Feed:
    """The full in-memory dataset for one transit network snapshot.

    All cross-entity relationships are plain key values resolved through the
    collections below.
    """

    def __init__(self) -> None:
        self.agencies: KeyedCollection[Agency] = KeyedCollection("agency", lambda a: a.agency_id)
        self.stops: KeyedCollection[Stop] = KeyedCollection("stops", lambda s: s.stop_id)
        self.routes: KeyedCollection[Route] = KeyedCollection("routes", lambda r: r.route_id)
        self.trips: KeyedCollection[Trip] = KeyedCollection("trips", lambda t: t.trip_id)
        self.stop_times: GroupedCollection[StopTime] = GroupedCollection(
            "stop_times", lambda st: st.trip_id
        )
        self.calendars: KeyedCollection[Calendar] = KeyedCollection(
            "calendar", lambda c: c.service_id
        )
        self.calendar_dates: GroupedCollection[CalendarDate] = GroupedCollection(
            "calendar_dates", lambda cd: cd.service_id
        )
        self.fare_attributes: KeyedCollection[FareAttribute] = KeyedCollection(
            "fare_attributes", lambda f: f.fare_id
        )
        self.fare_rules: EntityList[FareRule] = EntityList("fare_rules")
        self.shapes: GroupedCollection[ShapePoint] = GroupedCollection(
            "shapes", lambda p: p.shape_id
        )
        self.frequencies: EntityList[Frequency] = EntityList("frequencies")
        self.transfers: EntityList[Transfer] = EntityList("transfers")
        self.feed_info: EntityList[FeedInfo] = EntityList("feed_info")

        self._by_table: dict[str, EntityList[Any]] = {
            collection.table: collection
            for collection in (
                self.agencies,
                self.stops,
                self.routes,
                self.trips,
                self.stop_times,
                self.calendars,
                self.calendar_dates,
                self.fare_attributes,
                self.fare_rules,
                self.shapes,
                self.frequencies,
                self.transfers,
                self.feed_info,
            )
        }

    def collection(self, table: str) -> EntityList[Any]:
        """Return the collection holding the rows of a table.

        Raises:
            KeyError: If the table name is unknown.
        """
        return self._by_table[table]

    def add(self, table: str, entity: BaseModel) -> None:
        self.collection(table).add(entity)

    def tables(self) -> Iterator[tuple[str, EntityList[Any]]]:
        """Iterate over ``(table name, collection)`` pairs, empty ones included."""
        return iter(self._by_table.items())

    def row_counts(self) -> dict[str, int]:
        return {table: len(collection) for table, collection in self._by_table.items()}

    def service_ids(self) -> set[str]:
        """Service ids defined by calendar or calendar_dates."""
        return set(self.calendars.keys()) | set(self.calendar_dates.group_keys())

    def stop_times_for_trip(self, trip_id: str) -> list[StopTime]:
        """Stop times of a trip sorted by stop_sequence."""
        return sorted(self.stop_times.get(trip_id), key=lambda st: st.stop_sequence)

    def shape_points(self, shape_id: str) -> list[ShapePoint]:
        """Points of a shape sorted by shape_pt_sequence."""
        return sorted(self.shapes.get(shape_id), key=lambda p: p.shape_pt_sequence)

    def __repr__(self) -> str:
        counts = ", ".join(
            f"{table}={count}" for table, count in self.row_counts().items() if count
        )
        return f"Feed({counts})"
