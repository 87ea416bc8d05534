"""Persistence helpers for orders.

Every state change goes through :func:`apply_transition`, a single
``UPDATE ... WHERE id = ? AND <expected state>`` statement. Two requests
racing on the same order cannot both win: the loser affects zero rows and
re-reads the order to decide what to report.
"""
from core.extensions import db
from core.imports import update, or_, datetime, SQLAlchemyError
from models.orderModels import Order


def find_order_for_buyer(order_id, buyer_id):
    return Order.query.filter_by(id=order_id, buyer_id=buyer_id).first()


def find_order_for_seller(order_id, seller_id):
    return Order.query.filter_by(id=order_id, seller_id=seller_id).first()


def reload_order(order_id):
    # the identity map may hold a stale copy after a bulk UPDATE
    db.session.expire_all()
    return db.session.get(Order, order_id)


def apply_transition(order_id, values, **expected):
    """Write ``values`` only if every ``expected`` column still holds one of its allowed values.

    ``expected`` maps a column name to a tuple of allowed values, with ``None``
    inside the tuple matching SQL NULL. Returns True when exactly one row was
    updated and the change is committed, False when the order moved on.
    """
    stmt = update(Order).where(Order.id == order_id)
    for column_name, allowed in expected.items():
        column = getattr(Order, column_name)
        allowed = tuple(allowed)
        non_null = tuple(value for value in allowed if value is not None)
        if None in allowed and non_null:
            stmt = stmt.where(or_(column.is_(None), column.in_(non_null)))
        elif None in allowed:
            stmt = stmt.where(column.is_(None))
        else:
            stmt = stmt.where(column.in_(non_null))

    values = dict(values)
    values.setdefault("updated_at", datetime.utcnow())
    stmt = stmt.values(**values).execution_options(synchronize_session=False)

    try:
        result = db.session.execute(stmt)
        if result.rowcount != 1:
            db.session.rollback()
            return False
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise
    return True
