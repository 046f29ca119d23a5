"""Store helpers shared by the route handlers.

Results mirror what a document store reports for each write, so the API
answers with ``inserted_id``, ``matched_count``/``modified_count`` and
``deleted_count``.
"""
from sqlalchemy.orm import Query, Session


def insert_one(db: Session, obj):
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return {"inserted_id": obj.id}


def update_one(db: Session, model, values: dict, **filters):
    obj = db.query(model).filter_by(**filters).first()
    if obj is None:
        return {"matched_count": 0, "modified_count": 0}

    modified = False
    for key, value in values.items():
        if getattr(obj, key) != value:
            setattr(obj, key, value)
            modified = True

    if modified:
        db.commit()
    return {"matched_count": 1, "modified_count": int(modified)}


def delete_one(db: Session, model, **filters):
    obj = db.query(model).filter_by(**filters).first()
    if obj is None:
        return {"deleted_count": 0}

    db.delete(obj)
    db.commit()
    return {"deleted_count": 1}


def paginate(query: Query, page: int = 1, limit=None) -> Query:
    if limit is None:
        return query
    return query.offset((page - 1) * limit).limit(limit)
