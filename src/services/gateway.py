"""Data gateway -- CRUD and server-side functions over named collections.

Two backends implement the same contract:

* ``SqlGateway`` talks to the local SQLAlchemy store.
* ``RestGateway`` talks to a hosted PostgREST-style backend over HTTP.

Neither retries nor caches; failures surface as ``GatewayError`` (tagged
with a ``kind``) and callers decide what to show the user.
"""
import logging
from dataclasses import dataclass, replace
from typing import Any, Optional

import requests
from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError

from config import BACKEND_URL, BACKEND_KEY, BACKEND_TIMEOUT_SECONDS
from src.services.errors import GatewayError, NotFoundError

logger = logging.getLogger(__name__)

FILTER_OPS = ("eq", "neq", "gt", "gte", "lt", "lte", "ilike", "in", "not_null")
MUTATIONS = ("insert", "update", "delete")


@dataclass(frozen=True)
class Filter:
    field: str
    op: str
    value: Any = None

    def __post_init__(self):
        if self.op not in FILTER_OPS:
            raise ValueError(f"Invalid filter op: {self.op}. Must be one of {FILTER_OPS}")
        # Keep filters hashable so queries can key in-flight requests
        if isinstance(self.value, list):
            object.__setattr__(self, "value", tuple(self.value))


@dataclass(frozen=True)
class Query:
    """Immutable description of a collection read."""

    filters: tuple[Filter, ...] = ()
    order: Optional[tuple[str, str]] = None  # (field, "asc" | "desc")
    range: Optional[tuple[int, int]] = None  # inclusive (from, to)
    limit: Optional[int] = None

    def where(self, field_name: str, op: str, value: Any = None) -> "Query":
        return replace(self, filters=self.filters + (Filter(field_name, op, value),))

    def eq(self, field_name: str, value: Any) -> "Query":
        return self.where(field_name, "eq", value)

    def order_by(self, field_name: str, descending: bool = False) -> "Query":
        return replace(self, order=(field_name, "desc" if descending else "asc"))

    def newest_first(self) -> "Query":
        return self.order_by("created_at", descending=True)

    def page(self, start: int, end: int) -> "Query":
        if start < 0 or end < start:
            raise ValueError(f"Invalid range: {start}-{end}")
        return replace(self, range=(start, end))

    def take(self, count: int) -> "Query":
        return replace(self, limit=count)

    def key(self) -> tuple:
        """Hashable identity of this query (used to discard stale responses)."""
        return (self.filters, self.order, self.range, self.limit)


def _match_filters(match) -> tuple[Filter, ...]:
    """Accept a Query, a filter sequence, or an equality dict."""
    if match is None:
        return ()
    if isinstance(match, Query):
        return match.filters
    if isinstance(match, dict):
        return tuple(Filter(k, "eq", v) for k, v in match.items())
    return tuple(match)


class DataGateway:
    """Base contract shared by all gateways."""

    def fetch(self, collection: str, query: Query | None = None) -> list[dict]:
        raise NotImplementedError

    def count(self, collection: str, query: Query | None = None) -> int:
        raise NotImplementedError

    def mutate(self, collection: str, op: str, payload: dict | None = None, match=None) -> dict:
        raise NotImplementedError

    def rpc(self, name: str, params: dict | None = None):
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Convenience wrappers
    # ------------------------------------------------------------------

    def fetch_one(self, collection: str, query: Query | None = None) -> dict | None:
        """Return the single matching record, or None when nothing matches."""
        rows = self.fetch(collection, (query or Query()).take(2))
        if len(rows) > 1:
            raise GatewayError(f"Multiple rows returned from {collection}", kind="backend")
        return rows[0] if rows else None

    def insert(self, collection: str, payload: dict) -> dict:
        return self.mutate(collection, "insert", payload)

    def update(self, collection: str, payload: dict, match) -> dict:
        return self.mutate(collection, "update", payload, match)

    def delete(self, collection: str, match) -> dict:
        return self.mutate(collection, "delete", None, match)

    @staticmethod
    def _check_op(op: str, match) -> None:
        if op not in MUTATIONS:
            raise ValueError(f"Invalid mutation: {op}. Must be one of {MUTATIONS}")
        if op != "insert" and not _match_filters(match):
            raise ValueError(f"{op} requires a match filter")


# ----------------------------------------------------------------------
# SQLAlchemy gateway
# ----------------------------------------------------------------------


class SqlGateway(DataGateway):
    """Gateway over the local SQLAlchemy store."""

    def __init__(self, session_factory=None):
        if session_factory is None:
            from src.models.database import SessionLocal
            session_factory = SessionLocal
        self._session_factory = session_factory
        self._functions = {
            "calculate_product_rating": self._calculate_product_rating,
            "increment_view_count": self._increment_view_count,
        }

    @staticmethod
    def _model(collection: str):
        from src.models import COLLECTIONS
        model = COLLECTIONS.get(collection)
        if model is None:
            raise GatewayError(f"Unknown collection: {collection}", kind="not_found")
        return model

    @staticmethod
    def _column(model, name: str):
        if name not in model.__table__.columns:
            raise GatewayError(
                f"Unknown column {name!r} on {model.__tablename__}", kind="constraint"
            )
        return getattr(model, name)

    def _condition(self, model, flt: Filter):
        col = self._column(model, flt.field)
        if flt.op == "eq":
            return col.is_(None) if flt.value is None else col == flt.value
        if flt.op == "neq":
            return col.is_not(None) if flt.value is None else col != flt.value
        if flt.op == "gt":
            return col > flt.value
        if flt.op == "gte":
            return col >= flt.value
        if flt.op == "lt":
            return col < flt.value
        if flt.op == "lte":
            return col <= flt.value
        if flt.op == "ilike":
            return col.ilike(flt.value)
        if flt.op == "in":
            return col.in_(list(flt.value))
        return col.is_not(None)

    def _select(self, model, filters):
        stmt = select(model)
        for flt in filters:
            stmt = stmt.where(self._condition(model, flt))
        return stmt

    def fetch(self, collection: str, query: Query | None = None) -> list[dict]:
        query = query or Query()
        model = self._model(collection)
        stmt = self._select(model, query.filters)
        if query.order:
            col = self._column(model, query.order[0])
            stmt = stmt.order_by(col.desc() if query.order[1] == "desc" else col.asc())
        # Tie-break on identity so page boundaries are stable
        stmt = stmt.order_by(model.id)
        limit = query.limit
        if query.range:
            start, end = query.range
            span = end - start + 1
            limit = span if limit is None else min(limit, span)
            stmt = stmt.offset(start)
        if limit is not None:
            stmt = stmt.limit(limit)

        session = self._session_factory()
        try:
            rows = session.scalars(stmt).all()
            return [row.to_dict() for row in rows]
        except SQLAlchemyError as exc:
            logger.exception("Fetch from %s failed", collection)
            raise self._translate(exc) from exc
        finally:
            session.close()

    def count(self, collection: str, query: Query | None = None) -> int:
        model = self._model(collection)
        stmt = select(func.count()).select_from(model)
        for flt in (query.filters if query else ()):
            stmt = stmt.where(self._condition(model, flt))
        session = self._session_factory()
        try:
            return int(session.scalar(stmt) or 0)
        except SQLAlchemyError as exc:
            logger.exception("Count on %s failed", collection)
            raise self._translate(exc) from exc
        finally:
            session.close()

    def mutate(self, collection: str, op: str, payload: dict | None = None, match=None) -> dict:
        self._check_op(op, match)
        model = self._model(collection)
        payload = dict(payload or {})
        for name in payload:
            self._column(model, name)

        session = self._session_factory()
        try:
            if op == "insert":
                row = model(**payload)
                session.add(row)
                session.commit()
                session.refresh(row)
                logger.info("Inserted %s id=%s", collection, row.id)
                return row.to_dict()

            rows = session.scalars(self._select(model, _match_filters(match))).all()
            if not rows:
                raise NotFoundError(f"No {collection} record matches {match!r}")
            if op == "update":
                for row in rows:
                    for name, value in payload.items():
                        setattr(row, name, value)
                session.commit()
                session.refresh(rows[0])
                logger.info("Updated %d %s record(s)", len(rows), collection)
                return rows[0].to_dict()

            deleted = rows[0].to_dict()
            for row in rows:
                session.delete(row)
            session.commit()
            logger.info("Deleted %d %s record(s)", len(rows), collection)
            return deleted
        except SQLAlchemyError as exc:
            session.rollback()
            logger.exception("%s on %s failed", op, collection)
            raise self._translate(exc) from exc
        finally:
            session.close()

    def rpc(self, name: str, params: dict | None = None):
        fn = self._functions.get(name)
        if fn is None:
            raise GatewayError(f"Unknown function: {name}", kind="not_found")
        session = self._session_factory()
        try:
            return fn(session, **(params or {}))
        except SQLAlchemyError as exc:
            session.rollback()
            logger.exception("rpc %s failed", name)
            raise self._translate(exc) from exc
        finally:
            session.close()

    # Server-side functions

    @staticmethod
    def _calculate_product_rating(session, p_id: str) -> dict:
        from src.models.review import ProductRating
        from src.services.ratings import stats_from_counts

        counts = dict(
            session.execute(
                select(ProductRating.rating, func.count(ProductRating.id))
                .where(ProductRating.product_id == p_id)
                .group_by(ProductRating.rating)
            ).all()
        )
        average = session.scalar(
            select(func.avg(ProductRating.rating)).where(ProductRating.product_id == p_id)
        )
        return stats_from_counts(counts, average=average).to_record()

    @staticmethod
    def _increment_view_count(session, blog_id: str) -> None:
        from src.models.blog import Blog

        result = session.execute(
            update(Blog).where(Blog.id == blog_id).values(view_count=Blog.view_count + 1)
        )
        session.commit()
        if result.rowcount == 0:
            logger.warning("increment_view_count: no blog with id=%s", blog_id)

    @staticmethod
    def _translate(exc: SQLAlchemyError) -> GatewayError:
        if isinstance(exc, IntegrityError):
            return GatewayError(str(exc.orig), kind="constraint")
        if isinstance(exc, OperationalError):
            return GatewayError(str(exc.orig), kind="network")
        return GatewayError(str(exc), kind="backend")


# ----------------------------------------------------------------------
# Hosted REST gateway
# ----------------------------------------------------------------------


class RestGateway(DataGateway):
    """PostgREST-style gateway for the hosted backend."""

    def __init__(self, base_url: str, api_key: str, timeout: float = BACKEND_TIMEOUT_SECONDS,
                 http: requests.Session | None = None):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.http = http or requests.Session()
        self.http.headers.update({
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        })

    # ------------------------------------------------------------------
    # Encoding helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _literal(value) -> str:
        if isinstance(value, bool):
            return "true" if value else "false"
        if value is None:
            return "null"
        return str(value)

    @classmethod
    def _encode_filter(cls, flt: Filter) -> tuple[str, str]:
        if flt.op == "not_null":
            return flt.field, "not.is.null"
        if flt.op in ("eq", "neq") and flt.value is None:
            return flt.field, "is.null" if flt.op == "eq" else "not.is.null"
        if flt.op == "ilike":
            return flt.field, f"ilike.{str(flt.value).replace('%', '*')}"
        if flt.op == "in":
            return flt.field, "in.(" + ",".join(cls._literal(v) for v in flt.value) + ")"
        return flt.field, f"{flt.op}.{cls._literal(flt.value)}"

    def _params(self, filters) -> list[tuple[str, str]]:
        return [self._encode_filter(f) for f in filters]

    def _url(self, path: str) -> str:
        return f"{self.base_url}/rest/v1/{path}"

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        try:
            resp = self.http.request(method, self._url(path), timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise GatewayError(str(exc), kind="network") from exc
        if resp.status_code >= 400:
            raise self._http_error(resp)
        return resp

    @staticmethod
    def _http_error(resp: requests.Response) -> GatewayError:
        try:
            body = resp.json()
        except ValueError:
            body = {}
        message = body.get("message") or resp.text or f"HTTP {resp.status_code}"
        code = str(body.get("code") or "")
        if resp.status_code == 404:
            return NotFoundError(message)
        if resp.status_code == 409 or code.startswith("23"):
            return GatewayError(message, kind="constraint")
        return GatewayError(message, kind="backend")

    # ------------------------------------------------------------------
    # Contract
    # ------------------------------------------------------------------

    def fetch(self, collection: str, query: Query | None = None) -> list[dict]:
        query = query or Query()
        params = [("select", "*")] + self._params(query.filters)
        if query.order:
            params.append(("order", f"{query.order[0]}.{query.order[1]}"))
        if query.range:
            start, end = query.range
            params.append(("offset", str(start)))
            limit = end - start + 1
            if query.limit is not None:
                limit = min(limit, query.limit)
            params.append(("limit", str(limit)))
        elif query.limit is not None:
            params.append(("limit", str(query.limit)))
        return self._request("GET", collection, params=params).json() or []

    def count(self, collection: str, query: Query | None = None) -> int:
        params = [("select", "id")] + self._params(query.filters if query else ())
        resp = self._request("HEAD", collection, params=params, headers={"Prefer": "count=exact"})
        content_range = resp.headers.get("Content-Range", "")
        total = content_range.rsplit("/", 1)[-1]
        return int(total) if total.isdigit() else 0

    def mutate(self, collection: str, op: str, payload: dict | None = None, match=None) -> dict:
        self._check_op(op, match)
        headers = {"Prefer": "return=representation"}
        params = self._params(_match_filters(match))
        if op == "insert":
            rows = self._request("POST", collection, json=payload, headers=headers).json()
        elif op == "update":
            rows = self._request("PATCH", collection, params=params, json=payload, headers=headers).json()
        else:
            rows = self._request("DELETE", collection, params=params, headers=headers).json()
        if not rows:
            raise NotFoundError(f"No {collection} record matches {match!r}")
        return rows[0]

    def rpc(self, name: str, params: dict | None = None):
        resp = self._request("POST", f"rpc/{name}", json=params or {})
        return resp.json() if resp.content else None

    def upload_object(self, bucket: str, path: str, content: bytes, content_type: str) -> str:
        """Upload a blob to storage and return its public URL."""
        url = f"{self.base_url}/storage/v1/object/{bucket}/{path}"
        try:
            resp = self.http.post(
                url, data=content, headers={"Content-Type": content_type}, timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise GatewayError(str(exc), kind="network") from exc
        if resp.status_code >= 400:
            raise self._http_error(resp)
        return f"{self.base_url}/storage/v1/object/public/{bucket}/{path}"

    def delete_object(self, bucket: str, path: str) -> None:
        url = f"{self.base_url}/storage/v1/object/{bucket}/{path}"
        try:
            resp = self.http.delete(url, timeout=self.timeout)
        except requests.RequestException as exc:
            raise GatewayError(str(exc), kind="network") from exc
        if resp.status_code >= 400:
            raise self._http_error(resp)


_gateway: DataGateway | None = None


def get_gateway() -> DataGateway:
    """Return the process-wide gateway, built from config on first use."""
    global _gateway
    if _gateway is None:
        if BACKEND_URL:
            logger.info("Using hosted backend at %s", BACKEND_URL)
            _gateway = RestGateway(BACKEND_URL, BACKEND_KEY)
        else:
            _gateway = SqlGateway()
    return _gateway
