# blog-cdc-search

Keep a search index of blog posts in step with the database that stores them.

The package has no dependencies beyond the standard library. It holds the
domain model and services of a small blog with full-text search:

- **`blog_cdc_search.post`**: `Post`, a dataclass with `id`, `title`,
  `image`, `excerpt`, `body`, `created_at` and `updated_at`.
  `Post.create(title, image, excerpt, body)` builds a new post stamped with
  the current UTC time. `post.update(...)` replaces its content and refreshes
  `updated_at`. `post.validate()` checks it. An empty title or body raises
  `PostValidationError`. `PostNotFoundError` signals a missing post.
- **`blog_cdc_search.cdc_event`**: `CDCEvent` describes one row change
  (`database`, `table`, `type`, `data`, `old`, `ts`, `xid`, `xoffset`).
  `EventType` lists `insert`, `update`, `delete`, `bootstrap-start`,
  `bootstrap-insert` and `bootstrap-complete`. `from_json(data)` parses an
  event from bytes or text and raises `ValueError` on malformed input.
  `event.to_json()` serialises it. `event.is_valid()` requires database,
  table, type and data. `event.get_id()` returns the numeric `id` or `None`.
- **`blog_cdc_search.search_index`**: `SearchDocument`, the form a post takes
  in the index, with Unix-second timestamps.
  - `SearchDocument.from_post(post)` builds one from a post.
  - `SearchDocument.from_map(data)` builds one from a raw row. It raises
    `PostNotFoundError` if there is no numeric `id`. It accepts timestamps as
    numbers or RFC 3339 strings. Missing or unreadable timestamps default to
    now.
  - `to_dict()` returns a plain mapping.
- **`blog_cdc_search.repository`**: abstract classes `PostRepository`,
  `MessageQueueRepository` and `SearchIndexRepository`. The last two can be
  used as context managers (`connect()` on entry, `close()` on exit).
- **`blog_cdc_search.post_service`**: `PostService` offers `create_post`,
  `get_post`, `get_all_posts`, `update_post` and `delete_post` over a
  `PostRepository`. An id that is not positive raises `InvalidPostIdError`.
- **`blog_cdc_search.cdc_service`**: `CDCService` consumes change events and
  applies them to the `posts` collection.
- **`blog_cdc_search.search_service`**: `SearchService` runs queries and
  returns a `SearchResponse`.

## Installation

```
pip install .
```

## Example

```python
from blog_cdc_search.post_service import PostService
from blog_cdc_search.search_service import SearchParams, SearchService

posts = PostService(my_post_repository)
post = posts.create_post("Hello", "cover.jpg", "A first post", "Body text")

search = SearchService(my_search_index)
response = search.search_posts(SearchParams(query="hello", page=1, per_page=10))
for result in response.results:
    print(result.post.id, result.post.title, result.score, result.highlights)
print(response.total, response.total_pages)
```

Search behaviour:

- A blank query returns an empty response without calling the index.
- Otherwise the page defaults to 1 and `per_page` defaults to 10, capped at
  100.
- Results are sorted by text match, then by `created_at` descending, over
  `title`, `excerpt` and `body`.
- Hits without a usable id are skipped.
- Index failures raise `SearchError`.

`SearchService.get_all_posts_from_index()` lists every post in the index.

## Feeding the index from change events

```python
from blog_cdc_search.cdc_service import CDCService

CDCService(my_queue, my_search_index).start_cdc("blog-cdc")
```

How `start_cdc` runs:

1. It connects to the queue, then to the search index. A failure at either
   step raises `CDCError`.
2. It tries to create the `posts` collection. A failure here is logged, not
   raised.
3. It hands each message to `handle_message` until `consume_messages`
   returns.
4. It then closes both connections.

How `handle_message` treats each event:

- Events for tables other than `posts` are skipped.
- `insert`, `update` and `bootstrap-insert` upsert a `SearchDocument`.
- `delete` removes the document by id.
- `bootstrap-start` and `bootstrap-complete` are only logged.
- An invalid event, an unknown event type, or a delete without an id raises
  `CDCError`.

## What the package does not do

The package contains no concrete database, message-broker or search-engine
client. You supply your own subclasses of the classes in
`blog_cdc_search.repository`. It also has no HTTP server or command-line
program.

## Running the tests

```
pip install ".[test]"
pytest
```