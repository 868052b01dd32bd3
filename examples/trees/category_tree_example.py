"""
Category Tree Examples

This example walks through a small product category tree:
1. Creating nodes (coordinates are rebuilt after every write)
2. Reading the nested tree, ancestors and a parent picker
3. Moving a subtree and removing a node (children become orphans)

Before running:
1. Install the package: pip install -e .
"""

from nestdoc import InMemoryDocumentStore, TreeConfig, TreeModel


def print_coordinates(tree):
    for doc in tree.get_all("lft"):
        indent = "  " * max(doc["level"] - 1, 0)
        print(f"   {indent}{doc['name']:<12} lft={doc['lft']:<3} rght={doc['rght']:<3} level={doc['level']}")


def example_build():
    """Example 1: Build a tree"""
    print("=" * 70)
    print("Example 1: Building a category tree")
    print("=" * 70)
    
    tree = TreeModel(InMemoryDocumentStore(), TreeConfig(label_field="name"))
    
    tree.create({"item": "books", "name": "Books", "parent": ""})
    tree.create({"item": "novels", "name": "Novels", "parent": "books"})
    tree.create({"item": "classics", "name": "Classics", "parent": "novels"})
    tree.create({"item": "poetry", "name": "Poetry", "parent": "books"})
    tree.create({"item": "music", "name": "Music"})
    tree.create({"item": "jazz", "name": "Jazz", "parent": "music"})
    
    print("\n1. Stored coordinates:")
    print_coordinates(tree)
    return tree


def example_queries(tree):
    """Example 2: Structural queries"""
    print("\n" + "=" * 70)
    print("Example 2: Queries")
    print("=" * 70)
    
    print("\n1. Ancestors of 'classics':")
    print("   " + " > ".join(doc["name"] for doc in tree.get_parents("classics", include_current=True)))
    
    print("\n2. Parent picker while editing 'novels':")
    for option in tree.get_form_select_options("novels"):
        flag = " (disabled)" if option.disabled else ""
        print(f"   {option.label}{flag}")
    
    print("\n3. HTML:")
    print("   " + tree.display_tree(url="/category/[-ID-]"))


def example_mutations(tree):
    """Example 3: Moving and removing"""
    print("\n" + "=" * 70)
    print("Example 3: Moving and removing")
    print("=" * 70)
    
    poetry = tree.get_row("item", "poetry")
    tree.update(poetry, {"parent": "music"})
    print("\n1. After moving 'poetry' under 'music':")
    print_coordinates(tree)
    
    tree.remove({"item": "novels"})
    print("\n2. After removing 'novels':")
    print_coordinates(tree)
    print(f"   Orphans: {[doc['item'] for doc in tree.find_orphans()]}")
    print(f"   Invariant violations: {tree.check_invariants()}")


if __name__ == "__main__":
    tree = example_build()
    example_queries(tree)
    example_mutations(tree)
    print("\n✅ Done")
