# A tiny stack
# ============
#
# Sample Python input for the test suite.

class Stack:
    def __init__(self):
        self._items = []

    # `push` appends to the end of the backing list.
    def push(self, item):
        self._items.append(item)

    def pop(self):
        return self._items.pop()

# Compare sizes with `<` and `>` to exercise escaping.
def bigger(a, b):
    return a if len(a._items) > len(b._items) else b
