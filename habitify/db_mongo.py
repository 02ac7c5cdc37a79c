import re
from datetime import datetime

from bson.errors import InvalidId
from bson.objectid import ObjectId
from pymongo import MongoClient, ReturnDocument
from pymongo.errors import DuplicateKeyError

from habitify.config import MONGO_URI
from habitify.entries import decode_entries, encode_entry
from habitify.errors import EmailTaken, NotFound
from habitify.models import Habit, User

HABIT_FIELDS = ["title", "category", "frequency", "start_time", "end_time", "is_quantity", "goal_value", "unit"]


def _object_id(raw_id):
    try:
        return ObjectId(raw_id)
    except (InvalidId, TypeError):
        return None


def _doc_to_user(doc):
    return User(
        id=str(doc["_id"]),
        email=doc["email"],
        name=doc.get("name", ""),
        password_hash=doc.get("password_hash", ""),
        is_admin=bool(doc.get("is_admin", False)),
        xp=doc.get("xp", 0),
        level=doc.get("level", 1),
        created_at=doc.get("created_at"),
    )


def _doc_to_habit(doc):
    return Habit(
        id=str(doc["_id"]),
        user_id=doc["user_id"],
        title=doc["title"],
        category=doc.get("category", "General"),
        frequency=doc.get("frequency", "daily"),
        start_time=doc.get("start_time"),
        end_time=doc.get("end_time"),
        is_quantity=bool(doc.get("is_quantity", False)),
        goal_value=doc.get("goal_value"),
        unit=doc.get("unit"),
        completed_dates=decode_entries(doc.get("completed_dates", [])),
        created_at=doc.get("created_at"),
    )


class MongoStore:
    """HabitStore backed by MongoDB. Completion history is stored as a native array."""

    def __init__(self, uri=MONGO_URI, client=None):
        if client is None:
            if not uri:
                raise RuntimeError("MONGO_URI not found in .env")
            client = MongoClient(uri)
        self.client = client
        # Default DB name or from URI
        db_name = (uri or "").split("/")[-1].split("?")[0] or "habit_tracker"
        self.db = client[db_name]
        self.db.users.create_index("email", unique=True)
        self.db.habits.create_index("user_id")

    # --- USERS ---

    def create_user(self, email, name, password_hash, is_admin=False):
        doc = {
            "email": email,
            "name": name,
            "password_hash": password_hash,
            "is_admin": bool(is_admin),
            "xp": 0,
            "level": 1,
            "created_at": datetime.now(),
        }
        try:
            res = self.db.users.insert_one(doc)
        except DuplicateKeyError as e:
            raise EmailTaken(f"Email already in use: {email}") from e
        return self.get_user(str(res.inserted_id))

    def get_user(self, user_id):
        oid = _object_id(user_id)
        doc = self.db.users.find_one({"_id": oid}) if oid else None
        if not doc:
            raise NotFound(f"User not found: {user_id}")
        return _doc_to_user(doc)

    def get_user_by_email(self, email):
        doc = self.db.users.find_one({"email": {"$regex": f"^{re.escape(email)}$", "$options": "i"}})
        return _doc_to_user(doc) if doc else None

    def list_users(self):
        return [_doc_to_user(d) for d in self.db.users.find().sort("created_at", -1)]

    def save_user(self, user_id, xp, level):
        oid = _object_id(user_id)
        doc = None
        if oid:
            doc = self.db.users.find_one_and_update(
                {"_id": oid},
                {"$set": {"xp": xp, "level": level}},
                return_document=ReturnDocument.AFTER,
            )
        if not doc:
            raise NotFound(f"User not found: {user_id}")
        return _doc_to_user(doc)

    def delete_user(self, user_id):
        oid = _object_id(user_id)
        if not oid:
            return False
        self.db.habits.delete_many({"user_id": user_id})
        return self.db.users.delete_one({"_id": oid}).deleted_count > 0

    # --- HABITS ---

    def create_habit(self, user_id, habit_data):
        doc = {f: habit_data.get(f) for f in HABIT_FIELDS}
        doc.update({
            "user_id": user_id,
            "is_quantity": bool(habit_data.get("is_quantity")),
            "completed_dates": [],
            "created_at": datetime.now(),
        })
        res = self.db.habits.insert_one(doc)
        return self.get_habit(str(res.inserted_id))

    def get_habit(self, habit_id):
        oid = _object_id(habit_id)
        doc = self.db.habits.find_one({"_id": oid}) if oid else None
        if not doc:
            raise NotFound(f"Habit not found: {habit_id}")
        return _doc_to_habit(doc)

    def list_habits(self, user_id):
        return [_doc_to_habit(d) for d in self.db.habits.find({"user_id": user_id}).sort("created_at", -1)]

    def list_all_habits(self):
        return [_doc_to_habit(d) for d in self.db.habits.find().sort("created_at", -1)]

    def _update_habit_doc(self, habit_id, changes):
        oid = _object_id(habit_id)
        doc = None
        if oid:
            doc = self.db.habits.find_one_and_update(
                {"_id": oid},
                {"$set": changes},
                return_document=ReturnDocument.AFTER,
            )
        if not doc:
            raise NotFound(f"Habit not found: {habit_id}")
        return _doc_to_habit(doc)

    def update_habit(self, habit_id, habit_data):
        changes = {f: habit_data[f] for f in HABIT_FIELDS if f in habit_data}
        if not changes:
            return self.get_habit(habit_id)
        return self._update_habit_doc(habit_id, changes)

    def save_habit(self, habit_id, entries):
        return self._update_habit_doc(habit_id, {"completed_dates": [encode_entry(e) for e in entries]})

    def delete_habit(self, habit_id):
        oid = _object_id(habit_id)
        if not oid:
            return False
        return self.db.habits.delete_one({"_id": oid}).deleted_count > 0
