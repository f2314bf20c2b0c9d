import time

from renderscope import (
    DeepMemo,
    EngineConfig,
    ManualScheduler,
    PerformanceRegistry,
    StableReference,
)
from renderscope.report import render_report

registry = PerformanceRegistry(EngineConfig(slow_threshold_ms=8))

todos = [{"id": i, "title": f"Todo {i}", "done": i % 3 == 0} for i in range(10_000)]

# ------------------------------------------------------------------------------------------------

print()
print("=" * 100)
print("Windowing a large list")
print("-" * 100)
print()

# Only the rows inside the viewport (plus a few on each side) need rendering.
window = registry.window(len(todos), item_extent=32, viewport_extent=640, scroll_offset=12_800)
print(f"Scroll height: {window.total_extent}px")
print(f"Visible rows: {window.first_visible}..{window.last_visible}")
print(f"Rendered rows: {window.start_index}..{window.end_index} at offset {window.render_offset}px")

# ------------------------------------------------------------------------------------------------

print()
print("=" * 100)
print("Memoizing a derived list")
print("-" * 100)
print()

visible_todos = DeepMemo()
filters = {"done": False, "query": ""}


def apply_filters():
    print("  ...filtering")
    return [t for t in todos if t["done"] == filters["done"]]


# Structurally equal dependencies reuse the cached value, even if they are new objects.
visible_todos.get([filters], apply_filters)
visible_todos.get([{"done": False, "query": ""}], apply_filters)

# Mutating the dependency in place is seen as a change.
filters["done"] = True
visible_todos.get([filters], apply_filters)
print(f"Memo stats: {visible_todos.stats}")

# A stable reference lets identity-comparing consumers skip work.
stable = StableReference()
first = stable.get({"sort": "title"})
print(f"Same object for equal value: {stable.get({'sort': 'title'}) is first}")

# ------------------------------------------------------------------------------------------------

print()
print("=" * 100)
print("Debouncing an expensive search")
print("-" * 100)
print()

scheduler = ManualScheduler()
search = registry.debounced_memo("search", scheduler=scheduler)


def search_for(query):
    return lambda: [t["title"] for t in todos if query in t["title"]][:3]


for query in ("T", "To", "Tod", "Todo 9"):
    # Each keystroke returns the last committed result and restarts the timer.
    print(f"{query!r:10} -> {search.get(query, search_for(query))}")

scheduler.advance(registry.config.debounce_delay)
print(f"After the delay -> {search.value}")

# ------------------------------------------------------------------------------------------------

print()
print("=" * 100)
print("Profiling and rerender detection")
print("-" * 100)
print()

with registry.profiler.measure("sort-todos"):
    sorted(todos, key=lambda t: t["title"])

with registry.profiler.measure("slow-render"):
    time.sleep(0.02)

registry.create("TodoItem#1")
item = todos[1]
registry.update("TodoItem#1", {"todo": item, "selected": False})
registry.update("TodoItem#1", {"todo": item, "selected": True})
# Nothing changed: flagged as an unnecessary re-render
registry.update("TodoItem#1", {"todo": item, "selected": True})
registry.teardown("TodoItem#1")

# A host bridge reports committed renders of components.
registry.record_commit("TodoList", 11.2)
registry.record_commit("TodoItem#1", 0.8)

render_report(registry)
