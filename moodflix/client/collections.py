"""
Movie collections.

Guests keep collections in local storage only (local_ ids) under
moodflix_collections. Signed-in users also write each change to the server;
the optimistic temp_ record is kept as final and remembers the server id in
remote_id. Their local copy lives under moodflix_collections_<user_id>, so
guest collections and other accounts' collections never mix.
"""
from typing import Callable, Dict, List, Optional
import copy
import logging

from moodflix.client.errors import MoodFlixError
from moodflix.client.optimistic import attempt
from moodflix.client.records import now_iso, temp_id
from moodflix.client.state import AppState

logger = logging.getLogger(__name__)

STORAGE_KEY = "moodflix_collections"


def _from_server(collection: Dict) -> Dict:
    return {
        "id": f"remote_{collection['id']}",
        "remote_id": collection["id"],
        "name": collection["name"],
        "description": collection.get("description"),
        "is_public": collection.get("is_public", False),
        "created_at": collection.get("created_at"),
        "updated_at": collection.get("updated_at"),
        "movies": [
            {
                "id": f"remote_{m['id']}",
                "movie_id": m["movie_id"],
                "title": m["title"],
                "poster_path": m.get("poster_path"),
                "added_at": m.get("added_at"),
            }
            for m in collection.get("movies") or []
        ],
    }


class CollectionStore:
    def __init__(self, state: AppState):
        self.state = state
        self.collections: List[Dict] = []

    @property
    def notifier(self):
        return self.state.notifier

    @property
    def storage_key(self) -> str:
        if self.state.user:
            return f"{STORAGE_KEY}_{self.state.user.id}"
        return STORAGE_KEY

    def get(self, collection_id: str) -> Optional[Dict]:
        return next((c for c in self.collections if c["id"] == collection_id), None)

    def load(self) -> List[Dict]:
        """Read local storage, then refresh from the server when signed in"""
        self.collections = list(self.state.storage.get_json(self.storage_key, []) or [])
        if not self.state.is_signed_in:
            return self.collections
        try:
            data = self.state.api.user_data("get_collections", self.state.token)
            collections = [_from_server(c) for c in data.get("collections") or []]
            self.state.storage.set_json(self.storage_key, collections)
            self.collections = collections
        except MoodFlixError as e:
            logger.error(f"Error fetching collections, showing local copy: {str(e)}")
            self.notifier.error("Couldn't sync collections", str(e))
        return self.collections

    def _mutate(self, change: Callable[[List[Dict]], None], remote: Optional[Callable[[], Dict]] = None):
        """
        Apply change to a copy of the collections, persist it, then run the
        remote call. Any failure restores the previous list in memory and
        in storage. Returns the remote response ({} when local only).
        """
        key = self.storage_key

        def apply():
            previous = self.collections
            updated = copy.deepcopy(previous)
            change(updated)
            self.state.storage.set_json(key, updated)
            self.collections = updated
            return previous

        def commit():
            result = remote() if remote else {}
            self.state.storage.set_json(key, self.collections)
            return result

        def rollback(previous):
            self.collections = previous
            try:
                self.state.storage.set_json(key, previous)
            except MoodFlixError as e:
                logger.error(f"Could not restore stored collections: {str(e)}")

        return attempt(apply, commit, rollback)

    def _remote(self, collection: Optional[Dict]) -> bool:
        return self.state.is_signed_in and bool(collection and collection.get("remote_id"))

    def create(self, name: str, description: Optional[str] = None, is_public: bool = False) -> Optional[Dict]:
        name = (name or "").strip()
        if not name:
            self.notifier.error("Collection name is required")
            return None

        signed_in = self.state.is_signed_in
        record = {
            "id": temp_id("temp" if signed_in else "local"),
            "name": name,
            "description": description,
            "is_public": is_public,
            "created_at": now_iso(),
            "updated_at": now_iso(),
            "movies": [],
        }

        def change(collections):
            collections.insert(0, record)

        def remote():
            data = self.state.api.user_data("create_collection", self.state.token, {
                "name": name,
                "description": description,
                "is_public": is_public,
            })
            record["remote_id"] = data["collection"]["id"]
            return data

        try:
            self._mutate(change, remote if signed_in else None)
        except MoodFlixError as e:
            logger.error(f"Error creating collection: {str(e)}")
            self.notifier.error("Error creating collection", str(e))
            return None

        self.notifier.success("Collection created", f'"{name}" is ready for movies')
        return self.get(record["id"])

    def delete(self, collection_id: str) -> bool:
        collection = self.get(collection_id)
        if collection is None:
            self.notifier.error("Collection not found")
            return False

        def change(collections):
            collections[:] = [c for c in collections if c["id"] != collection_id]

        remote = None
        if self._remote(collection):
            def remote():
                return self.state.api.user_data("delete_collection", self.state.token, {
                    "collection_id": collection["remote_id"],
                })

        try:
            self._mutate(change, remote)
        except MoodFlixError as e:
            logger.error(f"Error deleting collection: {str(e)}")
            self.notifier.error("Error deleting collection", str(e))
            return False

        self.notifier.success("Collection deleted")
        return True

    def update(self, collection_id: str, **fields) -> bool:
        """Change name, description and/or is_public"""
        collection = self.get(collection_id)
        if collection is None:
            self.notifier.error("Collection not found")
            return False
        updates = {k: v for k, v in fields.items() if k in ("name", "description", "is_public")}
        if not updates:
            return False

        def change(collections):
            target = next(c for c in collections if c["id"] == collection_id)
            target.update(updates)
            target["updated_at"] = now_iso()

        remote = None
        if self._remote(collection):
            def remote():
                return self.state.api.user_data("update_collection", self.state.token, {
                    "collection_id": collection["remote_id"],
                    **updates,
                })

        try:
            self._mutate(change, remote)
        except MoodFlixError as e:
            logger.error(f"Error updating collection: {str(e)}")
            self.notifier.error("Error updating collection", str(e))
            return False

        if set(updates) == {"is_public"}:
            self.notifier.success("Collection is now public" if updates["is_public"] else "Collection is now private")
        else:
            self.notifier.success("Collection updated")
        return True

    def toggle_visibility(self, collection_id: str) -> bool:
        collection = self.get(collection_id)
        if collection is None:
            self.notifier.error("Collection not found")
            return False
        return self.update(collection_id, is_public=not collection.get("is_public", False))

    def add_movie(self, collection_id: str, movie: Dict) -> bool:
        collection = self.get(collection_id)
        if collection is None:
            self.notifier.error("Collection not found")
            return False

        movie_id = int(movie.get("movie_id") or movie["id"])
        if any(m["movie_id"] == movie_id for m in collection["movies"]):
            self.notifier.info("Movie already in collection")
            return False

        entry = {
            "id": temp_id("temp" if self.state.is_signed_in else "local"),
            "movie_id": movie_id,
            "title": movie["title"],
            "poster_path": movie.get("poster_path") or movie.get("posterUrl"),
            "added_at": now_iso(),
        }

        def change(collections):
            target = next(c for c in collections if c["id"] == collection_id)
            target["movies"].insert(0, entry)
            target["updated_at"] = entry["added_at"]

        remote = None
        if self._remote(collection):
            def remote():
                return self.state.api.user_data("add_to_collection", self.state.token, {
                    "collection_id": collection["remote_id"],
                    "movie_id": movie_id,
                    "title": entry["title"],
                    "poster_path": entry["poster_path"],
                })

        try:
            result = self._mutate(change, remote)
        except MoodFlixError as e:
            logger.error(f"Error adding to collection: {str(e)}")
            self.notifier.error("Error adding to collection", str(e))
            return False

        # Added from another device; the local entry now mirrors the server
        if result.get("alreadyExists"):
            self.notifier.info("Movie already in collection")
            return False

        self.notifier.success("Added to collection", f'"{entry["title"]}" added to {collection["name"]}')
        return True

    def remove_movie(self, collection_id: str, movie_id: int) -> bool:
        collection = self.get(collection_id)
        if collection is None:
            self.notifier.error("Collection not found")
            return False

        def change(collections):
            target = next(c for c in collections if c["id"] == collection_id)
            target["movies"] = [m for m in target["movies"] if m["movie_id"] != movie_id]
            target["updated_at"] = now_iso()

        remote = None
        if self._remote(collection):
            def remote():
                return self.state.api.user_data("remove_from_collection", self.state.token, {
                    "collection_id": collection["remote_id"],
                    "movie_id": movie_id,
                })

        try:
            self._mutate(change, remote)
        except MoodFlixError as e:
            logger.error(f"Error removing from collection: {str(e)}")
            self.notifier.error("Error removing from collection", str(e))
            return False

        self.notifier.success("Removed from collection")
        return True
