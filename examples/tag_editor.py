from arraysync import A, Model, array_member_observer, joined_array, nested_array_observer

# ------------------------------------------------------------------------------------------------

print()
print("=" * 100)
print("Watching an array")
print("-" * 100)
print()


def log_added(owner, tag, index):
    print(f"  + {tag!r} at {index}")


def log_removed(owner, tag, index):
    print(f"  - {tag!r} at {index}")


class Post(Model):
    # A text field bound to the tags array, split and joined on commas.
    tag_string = joined_array("tags", ",")

    # Per-item callbacks for everything that enters or leaves the tags array.
    tag_log = array_member_observer("tags", added=log_added, removed=log_removed)


# Existing tags are reported as soon as the post is created.
post = Post(tags=A(["python", "arrays"]))

# In-place mutations are reported item by item.
post.tags.append("sync")

# ------------------------------------------------------------------------------------------------

print()
print("=" * 100)
print("Editing the joined string")
print("-" * 100)
print()

print(f"tag_string: {post.tag_string}")

# Assigning a string merges it into the same array: removals and additions only.
post.tag_string = "python,sync,observers"
print(f"tags: {list(post.tags)}")

# An empty string clears the array, and None puts back the tags first seen.
post.tag_string = ""
post.tag_string = None
print(f"tags restored: {list(post.tags)}")

# Replacing the whole array reports the old items removed and the new ones added.
post.tags = A(["fresh"])

# ------------------------------------------------------------------------------------------------

print()
print("=" * 100)
print("Watching arrays of arrays")
print("-" * 100)
print()


def report_column(owner, column):
    print(f"  column now holds {list(column)}")


class Board(Model):
    columns_watch = nested_array_observer("columns", report_column)


todo = A(["write docs"])
board = Board(columns=A([todo]))

# Adding a column reports it straight away, and each change to it afterwards.
done = A()
board.columns.append(done)
done.append(todo.pop())

board.destroy()
