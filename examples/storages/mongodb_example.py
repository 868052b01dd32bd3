"""
MongoDB Document Store Example

Keeps a nested-set tree in a MongoDB collection.

Before running:
1. Install dependencies: pip install -e ".[mongo]"
2. Start MongoDB: docker run -p 27017:27017 mongo
"""

from nestdoc import MongoDocumentStore, RebuildStrategy, TreeConfig, TreeModel


def main():
    print("=" * 70)
    print("MongoDB-backed tree")
    print("=" * 70)
    
    config = TreeConfig(label_field="name", order_field="name")
    
    with MongoDocumentStore(database="nestdoc_example", collection="categories") as store:
        store.clear()
        print(f"\n1. Indexes: {store.create_tree_indexes(config)}")
        
        tree = TreeModel(store, config)
        tree.create({"item": "fruit", "name": "Fruit"})
        tree.create({"item": "apple", "name": "Apple", "parent": "fruit"})
        tree.create({"item": "banana", "name": "Banana", "parent": "fruit"})
        
        print("\n2. Tree:")
        for node in tree.get_tree().iter_nodes():
            print(f"   {'  ' * (node.level - 1)}{node.name} ({node.left}, {node.right})")
        
        result = tree.rebuild(RebuildStrategy.PER_NODE)
        print(f"\n3. Per-node rebuild: {result.nodes} nodes, {result.written} written")


if __name__ == "__main__":
    main()
