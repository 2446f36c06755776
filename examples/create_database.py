
import duckdb
import pyarrow as pa
import os

def create_items_database():
    """
    Creates a DuckDB database file with a sample table for the editor.

    Run the server against it with:
        EDITOR_DATABASE=examples/items.duckdb APP_TABLE=items APP_PK=sku,store python -m bi_editor.main
    """
    db_path = os.path.join(os.path.dirname(__file__), "items.duckdb")

    # Delete existing database file if it exists
    if os.path.exists(db_path):
        os.remove(db_path)

    con = duckdb.connect(db_path)

    # Create sample data; bi_* columns are the editable ones
    sample_data = pa.table({
        "sku": ["A-100", "A-100", "B-200", "B-200", "C-300"],
        "store": ["North", "South", "North", "South", "North"],
        "description": ["Widget", "Widget", "Gadget", "Gadget", "Gizmo"],
        "stock": [12, 7, 30, 0, 4],
        "bi_target": [15, 10, 25, 5, None],
        "bi_comment": ["", "low", None, "restock", ""],
    })

    con.execute("CREATE TABLE items AS SELECT * FROM sample_data")

    print(f"Database 'items.duckdb' created successfully in the 'examples' directory.")

    print("\nContent of the 'items' table:")
    print(con.execute("SELECT * FROM items").fetch_arrow_table())

    con.close()

if __name__ == "__main__":
    create_items_database()
