"""Named global scopes and the query builder that applies them.

A global scope is a named predicate attached to a mapped class. Queries built
through ``ScopedQuery`` apply every global scope of their model unless the
query removed it by name. Scopes registered on a mapped superclass apply to
its subclasses too. Scopes can also be detached process-wide with
``remove_global_scope``.

Usage:
    add_global_scope(Article, "visible", lambda model: model.hidden.is_(False))

    Article.query().where(Article.title == "Hello").all(session)
    Article.query().without_global_scope("visible").all(session)
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Callable, Dict, Optional, Tuple, Union

from sqlalchemy import func, select
from sqlalchemy.orm import Session
from sqlalchemy.sql import ClauseElement, Select

logger = logging.getLogger(__name__)

Scope = Callable[[type], ClauseElement]
# Either a SQL expression or a callable building one from the query at statement time
Criterion = Union[ClauseElement, Callable[["ScopedQuery"], ClauseElement]]

_global_scopes: Dict[type, Dict[str, Scope]] = {}


def add_global_scope(model: type, name: str, scope: Scope) -> None:
    """Register ``scope`` under ``name`` for ``model``, replacing any scope of that name."""
    _global_scopes.setdefault(model, {})[name] = scope
    logger.debug(f"Registered global scope '{name}' on {model.__name__}")


def remove_global_scope(model: type, name: str) -> bool:
    """Detach a global scope process-wide. Returns False if none was registered."""
    scopes = _global_scopes.get(model)
    if not scopes or name not in scopes:
        return False
    del scopes[name]
    logger.debug(f"Removed global scope '{name}' from {model.__name__}")
    return True


def global_scopes(model: type) -> Dict[str, Scope]:
    """Global scopes of ``model`` and its superclasses.

    A scope registered on a subclass replaces a same-named scope of a superclass.
    """
    scopes: Dict[str, Scope] = {}
    for klass in reversed(model.__mro__):
        scopes.update(_global_scopes.get(klass, {}))
    return scopes


def has_global_scope(model: type, name: str) -> bool:
    return name in global_scopes(model)


class ScopedQuery:
    """Generative SELECT builder for one mapped class.

    Every method returns a new query; the receiver is never modified.
    Scope callables and deferred criteria run inside ``statement()``, so
    time-dependent predicates see the clock at the moment the query is built
    for execution.
    """

    def __init__(self, model: type):
        self.model = model
        self._criteria: Tuple[Criterion, ...] = ()
        self._joins: Tuple[Tuple[Any, Any, bool], ...] = ()
        self._order_by: Tuple[Any, ...] = ()
        self._limit: Optional[int] = None
        self._offset: Optional[int] = None
        self._removed_scopes: frozenset = frozenset()
        self._without_all_scopes = False

    def _clone(self, **changes) -> "ScopedQuery":
        query = copy.copy(self)
        for key, value in changes.items():
            setattr(query, key, value)
        return query

    def where(self, *criteria: Criterion) -> "ScopedQuery":
        return self._clone(_criteria=self._criteria + criteria)

    def join(self, target: Any, onclause: Any = None) -> "ScopedQuery":
        return self._clone(_joins=self._joins + ((target, onclause, False),))

    def outerjoin(self, target: Any, onclause: Any = None) -> "ScopedQuery":
        return self._clone(_joins=self._joins + ((target, onclause, True),))

    def order_by(self, *clauses: Any) -> "ScopedQuery":
        return self._clone(_order_by=self._order_by + clauses)

    def limit(self, limit: Optional[int]) -> "ScopedQuery":
        return self._clone(_limit=limit)

    def offset(self, offset: Optional[int]) -> "ScopedQuery":
        return self._clone(_offset=offset)

    def without_global_scope(self, name: str) -> "ScopedQuery":
        return self._clone(_removed_scopes=self._removed_scopes | {name})

    def without_global_scopes(self, *names: str) -> "ScopedQuery":
        """Remove the named scopes, or every global scope when no names are given."""
        if not names:
            return self._clone(_without_all_scopes=True)
        return self._clone(_removed_scopes=self._removed_scopes | set(names))

    @property
    def removed_scopes(self) -> frozenset:
        if self._without_all_scopes:
            return frozenset(global_scopes(self.model)) | self._removed_scopes
        return self._removed_scopes

    def applied_scopes(self) -> Dict[str, Scope]:
        if self._without_all_scopes:
            return {}
        return {
            name: scope
            for name, scope in global_scopes(self.model).items()
            if name not in self._removed_scopes
        }

    def has_joins(self) -> bool:
        return len(self._joins) > 0

    def _resolve(self, criterion: Criterion) -> ClauseElement:
        if isinstance(criterion, ClauseElement):
            return criterion
        return criterion(self)

    def statement(self) -> Select:
        stmt = select(self.model)
        for target, onclause, isouter in self._joins:
            stmt = stmt.join(target, onclause, isouter=isouter)
        for scope in self.applied_scopes().values():
            stmt = stmt.where(scope(self.model))
        for criterion in self._criteria:
            stmt = stmt.where(self._resolve(criterion))
        if self._order_by:
            stmt = stmt.order_by(*self._order_by)
        if self._limit is not None:
            stmt = stmt.limit(self._limit)
        if self._offset is not None:
            stmt = stmt.offset(self._offset)
        return stmt

    def all(self, session: Session) -> list:
        return list(session.scalars(self.statement()).unique().all())

    def first(self, session: Session):
        stmt = self.statement()
        if self._limit is None or self._limit > 1:
            stmt = stmt.limit(1)
        return session.scalars(stmt).first()

    def count(self, session: Session) -> int:
        subquery = self.statement().order_by(None).subquery()
        return session.scalar(select(func.count()).select_from(subquery))

    def __repr__(self) -> str:
        return (
            f"<ScopedQuery {self.model.__name__} scopes={sorted(self.applied_scopes())} "
            f"joins={len(self._joins)}>"
        )
