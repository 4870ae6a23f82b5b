# farmetrics_dashboard/data_processing/store.py
# ENTITY STORE QUERY CAPABILITY

"""
The boundary between the aggregation functions and the managed backend.

Aggregation code only ever builds a `Query` and hands it to an `EntityStore`.
Two stores implement the capability:

- `SqlEntityStore` runs queries with SQLAlchemy Core against the reflected
  tables of the backend's Postgres database.
- `FrameEntityStore` runs the same queries over in-memory pandas DataFrames
  (CSV snapshots loaded by `loaders.py`, and the test fixtures).

Both return DataFrames whose timestamp columns are timezone-aware UTC and
raise `QueryError` for every failure.
"""

import abc
import logging
import operator
import uuid
from typing import Any, Callable, Dict, List, Literal, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from pydantic import BaseModel, Field
from sqlalchemy import MetaData, Table, create_engine, func, inspect, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import NoSuchTableError, SQLAlchemyError

from .helpers import DataPipeline

logger = logging.getLogger(__name__)

TIMESTAMP_COLUMNS: Tuple[str, ...] = ('created_at', 'updated_at', 'visit_date', 'resolved_at', 'approved_at')

FilterOp = Literal['eq', 'neq', 'in', 'is_null', 'not_null', 'gte', 'lte', 'gt', 'lt']


class QueryError(Exception):
    """Raised when the entity store cannot answer a query."""


class Filter(BaseModel):
    column: str
    op: FilterOp
    value: Any = None


class Expansion(BaseModel):
    """One-hop relationship: `foreign_key` on the queried table points at `target_key` of `table`."""
    alias: str
    table: str
    foreign_key: str
    columns: List[str] = Field(default_factory=list)
    target_key: str = 'id'

    def output_columns(self) -> List[str]:
        return [f"{self.alias}_{col}" for col in self.columns]


class Query:
    """
    Fluent, backend-agnostic description of a read against one table.

    Usage:
        latest = (Query('farm_visits')
                  .select('id', 'created_at', 'status')
                  .not_null('gps_latitude')
                  .expand('officer', 'profiles', 'field_officer_id', ['full_name', 'region'])
                  .order('created_at', descending=True)
                  .limit(10))
    """
    def __init__(self, table: str):
        self.table = table
        self.columns: List[str] = []
        self.filters: List[Filter] = []
        self.expansions: List[Expansion] = []
        self.order_by: Optional[Tuple[str, bool]] = None
        self.row_limit: Optional[int] = None

    def _add(self, column: str, op: str, value: Any = None) -> 'Query':
        self.filters.append(Filter(column=column, op=op, value=value))
        return self

    def select(self, *columns: str) -> 'Query':
        self.columns.extend(columns)
        return self

    def eq(self, column: str, value: Any) -> 'Query': return self._add(column, 'eq', value)
    def neq(self, column: str, value: Any) -> 'Query': return self._add(column, 'neq', value)
    def in_(self, column: str, values: Sequence[Any]) -> 'Query': return self._add(column, 'in', list(values))
    def is_null(self, column: str) -> 'Query': return self._add(column, 'is_null')
    def not_null(self, column: str) -> 'Query': return self._add(column, 'not_null')
    def gte(self, column: str, value: Any) -> 'Query': return self._add(column, 'gte', value)
    def lte(self, column: str, value: Any) -> 'Query': return self._add(column, 'lte', value)
    def gt(self, column: str, value: Any) -> 'Query': return self._add(column, 'gt', value)
    def lt(self, column: str, value: Any) -> 'Query': return self._add(column, 'lt', value)

    def order(self, column: str, descending: bool = False) -> 'Query':
        self.order_by = (column, descending)
        return self

    def limit(self, count: int) -> 'Query':
        if count < 0:
            raise ValueError("Query limit must be non-negative.")
        self.row_limit = count
        return self

    def expand(self, alias: str, table: str, foreign_key: str, columns: Sequence[str], target_key: str = 'id') -> 'Query':
        self.expansions.append(Expansion(alias=alias, table=table, foreign_key=foreign_key, columns=list(columns), target_key=target_key))
        return self

    def __repr__(self) -> str:
        filters = ", ".join(f"{f.column} {f.op}" for f in self.filters)
        return f"Query({self.table!r}, filters=[{filters}], order={self.order_by}, limit={self.row_limit})"


class EntityStore(abc.ABC):
    """Read-only query capability over the dashboard's tables."""

    @abc.abstractmethod
    def fetch(self, query: Query) -> pd.DataFrame:
        """Returns the matching rows (plus expanded relationship columns)."""

    @abc.abstractmethod
    def count(self, query: Query) -> int:
        """Returns the number of matching rows; ordering, limit and expansion are ignored."""

    @abc.abstractmethod
    def tables(self) -> List[str]:
        """Names of the tables this store can answer for."""


def _normalize_timestamps(df: pd.DataFrame) -> pd.DataFrame:
    date_cols = [col for col in df.columns if col.endswith(TIMESTAMP_COLUMNS)]
    return DataPipeline(df).convert_date_columns(date_cols).get_dataframe() if date_cols else df


def _stringify_uuids(df: pd.DataFrame) -> pd.DataFrame:
    """Postgres uuid columns arrive as `uuid.UUID`; the read models key everything on strings."""
    for col in df.columns[df.dtypes == object]:
        if df[col].map(lambda v: isinstance(v, uuid.UUID)).any():
            df[col] = df[col].map(lambda v: str(v) if isinstance(v, uuid.UUID) else v)
    return df


# --- In-memory backend ---

_FRAME_OPS: Dict[str, Callable[[pd.Series, Any], pd.Series]] = {
    'eq': lambda s, v: s == v,
    'neq': lambda s, v: (s != v) & s.notna(),
    'in': lambda s, v: s.isin(v),
    'is_null': lambda s, v: s.isna(),
    'not_null': lambda s, v: s.notna(),
    'gte': operator.ge, 'lte': operator.le, 'gt': operator.gt, 'lt': operator.lt,
}


class FrameEntityStore(EntityStore):
    """Answers queries from a dict of table name -> DataFrame."""

    def __init__(self, tables: Dict[str, pd.DataFrame]):
        self._tables = {name: _normalize_timestamps(df.copy()) for name, df in tables.items()}

    def tables(self) -> List[str]:
        return sorted(self._tables)

    def _table(self, name: str) -> pd.DataFrame:
        if name not in self._tables:
            raise QueryError(f"Unknown table '{name}'.")
        return self._tables[name]

    @staticmethod
    def _require(df: pd.DataFrame, table: str, columns: Sequence[str]) -> None:
        missing = [col for col in columns if col not in df.columns]
        if missing:
            raise QueryError(f"Unknown column(s) {missing} on table '{table}'.")

    def _filtered(self, query: Query) -> pd.DataFrame:
        df = self._table(query.table)
        self._require(df, query.table, [flt.column for flt in query.filters])
        mask = pd.Series(True, index=df.index)
        for flt in query.filters:
            try:
                mask &= _FRAME_OPS[flt.op](df[flt.column], flt.value).fillna(False).astype(bool)
            except TypeError as e:
                raise QueryError(f"Cannot apply '{flt.op}' to {query.table}.{flt.column}: {e}") from e
        return df[mask]

    def _expand(self, df: pd.DataFrame, table: str, expansion: Expansion) -> pd.DataFrame:
        target = self._table(expansion.table)
        self._require(df, table, [expansion.foreign_key])
        self._require(target, expansion.table, [expansion.target_key, *expansion.columns])

        key_col = f"__{expansion.alias}_key"
        related = (target[[expansion.target_key, *expansion.columns]]
                   .drop_duplicates(subset=expansion.target_key)
                   .rename(columns={expansion.target_key: key_col, **dict(zip(expansion.columns, expansion.output_columns()))}))
        # Keys are compared as objects so an all-null foreign key column still merges.
        related[key_col] = related[key_col].astype(object)
        merged = df.assign(**{key_col: df[expansion.foreign_key].astype(object)}).merge(related, how='left', on=key_col)
        merged.index = df.index
        return merged.drop(columns=[key_col])

    def fetch(self, query: Query) -> pd.DataFrame:
        df = self._filtered(query)

        if query.order_by:
            column, descending = query.order_by
            self._require(df, query.table, [column])
            df = df.sort_values(column, ascending=not descending, na_position='last', kind='mergesort')
        if query.row_limit is not None:
            df = df.head(query.row_limit)

        for expansion in query.expansions:
            df = self._expand(df, query.table, expansion)

        if query.columns:
            self._require(df, query.table, query.columns)
            expanded = [col for exp in query.expansions for col in exp.output_columns()]
            df = df[list(dict.fromkeys([*query.columns, *expanded]))]
        return df.reset_index(drop=True)

    def count(self, query: Query) -> int:
        return int(len(self._filtered(query)))


# --- SQL backend ---

def _sql_value(value: Any) -> Any:
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    if isinstance(value, np.generic):
        return value.item()
    if isinstance(value, list):
        return [_sql_value(v) for v in value]
    return value


_SQL_OPS: Dict[str, Callable[[Any, Any], Any]] = {
    'eq': lambda c, v: c == v,
    'neq': lambda c, v: c != v,
    'in': lambda c, v: c.in_(v),
    'is_null': lambda c, v: c.is_(None),
    'not_null': lambda c, v: c.is_not(None),
    'gte': operator.ge, 'lte': operator.le, 'gt': operator.gt, 'lt': operator.lt,
}


class SqlEntityStore(EntityStore):
    """Answers queries with SQLAlchemy Core against reflected backend tables."""

    def __init__(self, engine: Engine, schema: Optional[str] = None):
        self.engine = engine
        self.schema = schema
        self.metadata = MetaData(schema=schema)
        self._reflected: Dict[str, Table] = {}

    @classmethod
    def from_url(cls, database_url: str, schema: Optional[str] = None) -> 'SqlEntityStore':
        return cls(create_engine(database_url, pool_pre_ping=True), schema=schema)

    def tables(self) -> List[str]:
        try:
            return sorted(inspect(self.engine).get_table_names(schema=self.schema))
        except SQLAlchemyError as e:
            raise QueryError(f"Could not list backend tables: {e}") from e

    def _table(self, name: str) -> Table:
        if name not in self._reflected:
            try:
                self._reflected[name] = Table(name, self.metadata, autoload_with=self.engine)
            except NoSuchTableError as e:
                raise QueryError(f"Unknown table '{name}'.") from e
            except SQLAlchemyError as e:
                raise QueryError(f"Could not reflect table '{name}': {e}") from e
        return self._reflected[name]

    @staticmethod
    def _column(table: Any, name: str) -> Any:
        try:
            return table.c[name]
        except KeyError as e:
            raise QueryError(f"Unknown column '{name}' on table '{table.name}'.") from e

    def _apply_filters(self, stmt: Any, table: Table, query: Query) -> Any:
        for flt in query.filters:
            stmt = stmt.where(_SQL_OPS[flt.op](self._column(table, flt.column), _sql_value(flt.value)))
        return stmt

    def fetch(self, query: Query) -> pd.DataFrame:
        table = self._table(query.table)
        columns = [self._column(table, col) for col in query.columns] if query.columns else list(table.c)

        source: Any = table
        expanded = []
        for expansion in query.expansions:
            target = self._table(expansion.table).alias(expansion.alias)
            source = source.outerjoin(
                target, self._column(table, expansion.foreign_key) == self._column(target, expansion.target_key)
            )
            expanded.extend(self._column(target, col).label(label)
                            for col, label in zip(expansion.columns, expansion.output_columns()))

        stmt = self._apply_filters(select(*columns, *expanded).select_from(source), table, query)
        if query.order_by:
            column, descending = query.order_by
            order_col = self._column(table, column)
            stmt = stmt.order_by(order_col.desc().nulls_last() if descending else order_col.asc().nulls_last())
        if query.row_limit is not None:
            stmt = stmt.limit(query.row_limit)

        try:
            with self.engine.connect() as conn:
                df = pd.read_sql(stmt, conn)
        except SQLAlchemyError as e:
            raise QueryError(f"Query failed for {query!r}: {e}") from e
        return _normalize_timestamps(_stringify_uuids(df))

    def count(self, query: Query) -> int:
        table = self._table(query.table)
        stmt = self._apply_filters(select(func.count()).select_from(table), table, query)
        try:
            with self.engine.connect() as conn:
                return int(conn.execute(stmt).scalar_one())
        except SQLAlchemyError as e:
            raise QueryError(f"Count failed for {query!r}: {e}") from e
