"""
MongoDB connection for the Store Ratings API.

`db` is the database handle the route handlers use; collections are named after
the schema classes in lowercase ("user", "store", "rating").
"""

import os

from pymongo import ASCENDING, MongoClient

DATABASE_URL = os.getenv("DATABASE_URL", "mongodb://localhost:27017")
DATABASE_NAME = os.getenv("DATABASE_NAME", "store_ratings")

client = MongoClient(DATABASE_URL, tz_aware=True)
db = client[DATABASE_NAME]


def ensure_indexes(database) -> None:
    database["user"].create_index([("email", ASCENDING)], unique=True)
    database["store"].create_index([("owner_id", ASCENDING)])
    # one rating per user per store
    database["rating"].create_index([("user_id", ASCENDING), ("store_id", ASCENDING)], unique=True)
