"""
SQL tools: queries, DML and IMap mappings through the cluster's SQL engine.

Every tool needs ``access.operations.sql``; statements that change data or
mappings also need ``access.operations.write``.
"""

from typing import Any, Dict, List, Optional

from access_control import CONFIG_FILE_HINT
from runtime_state import runtime_state

from .common import call_store, decode, deny, reject

DEFAULT_PAGE_SIZE = 100
MAX_PAGE_SIZE = 1000

WRITE_STATEMENTS = ("INSERT", "UPDATE", "DELETE", "SINK")


def _sql_denial(write_statement: Optional[str] = None) -> Optional[str]:
    access = runtime_state.access
    if not access.is_sql_allowed():
        return access.denial_message("sql", "")
    if write_statement and not access.is_write_allowed():
        return (
            f"Write SQL operations ({write_statement}) are disabled. "
            f"Set 'access.operations.write: true' in {CONFIG_FILE_HINT} to enable."
        )
    return None


def _write_statement(query: str) -> Optional[str]:
    words = query.strip().split(None, 1)
    keyword = words[0].upper() if words else ""
    return keyword if keyword in WRITE_STATEMENTS else None


def _quote_identifier(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


def _quote_literal(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


def _blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


def _execute(client: Any, statement: str, *params: Any) -> Any:
    return client.sql.execute(statement, *params).result()


async def sql_execute(
    query: str,
    params: Optional[List[Any]] = None,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> str:
    """
    Execute a SQL query against Hazelcast and return the rows as JSON.

    Supports SELECT, INSERT, UPDATE and DELETE. Use ``?`` placeholders with
    ``params`` instead of splicing values into the query.

    Args:
        query: SQL text, e.g. "SELECT * FROM customers WHERE age > ?"
        params: Positional parameters matching the ``?`` placeholders
        page_size: Maximum number of rows to return (1-1000)
    """
    if _blank(query):
        return await reject("sql_execute", "sql_execute: query must be a non-empty string.")
    if params is not None and not isinstance(params, list):
        return await reject("sql_execute", "sql_execute: params must be a list.")
    valid_page = isinstance(page_size, int) and not isinstance(page_size, bool)
    if not valid_page or not 1 <= page_size <= MAX_PAGE_SIZE:
        return await reject(
            "sql_execute", f"sql_execute: page_size must be between 1 and {MAX_PAGE_SIZE}."
        )
    denied = _sql_denial(_write_statement(query))
    if denied:
        return await deny("sql_execute", denied)

    def _op(client: Any) -> Dict[str, Any]:
        with _execute(client, query, *(params or [])) as result:
            if not result.is_row_set():
                count = result.update_count()
                return {
                    "updateCount": count,
                    "message": f"Query executed successfully. Rows affected: {count}",
                }
            columns = [column.name for column in result.get_row_metadata().columns]
            rows: List[Dict[str, Any]] = []
            has_more = False
            for row in result:
                if len(rows) >= page_size:
                    has_more = True
                    break
                rows.append(
                    {
                        column: decode(row.get_object_with_index(index))
                        for index, column in enumerate(columns)
                    }
                )
        return {
            "columns": columns,
            "rowCount": len(rows),
            "pageSize": page_size,
            "hasMore": has_more,
            "rows": rows,
        }

    return await call_store("sql_execute", _op)


async def sql_create_mapping(
    mapping_name: str,
    map_name: str,
    key_format: str,
    value_format: str,
) -> str:
    """
    Create a SQL mapping for an existing IMap so it can be queried.

    Args:
        mapping_name: Name of the mapping to create
        map_name: Name of the IMap it points at
        key_format: Key format, e.g. "varchar"
        value_format: Value format, e.g. "json"
    """
    for label, value in (
        ("mapping_name", mapping_name),
        ("map_name", map_name),
        ("key_format", key_format),
        ("value_format", value_format),
    ):
        if _blank(value):
            return await reject(
                "sql_create_mapping", f"sql_create_mapping: {label} must be a non-empty string."
            )
    denied = _sql_denial("CREATE MAPPING")
    if not denied and not runtime_state.access.is_accessible("map", map_name):
        denied = runtime_state.access.denial_message("sql", map_name)
    if denied:
        return await deny("sql_create_mapping", denied)

    statement = (
        f"CREATE MAPPING IF NOT EXISTS {_quote_identifier(mapping_name)} "
        f"EXTERNAL NAME {_quote_identifier(map_name)} TYPE IMap "
        f"OPTIONS ('keyFormat'={_quote_literal(key_format)}, "
        f"'valueFormat'={_quote_literal(value_format)})"
    )

    def _op(client: Any) -> Dict[str, Any]:
        with _execute(client, statement):
            pass
        return {"mapping": mapping_name, "sql": statement, "message": "Mapping created successfully."}

    return await call_store("sql_create_mapping", _op)


async def sql_drop_mapping(mapping_name: str) -> str:
    """Drop a SQL mapping. The underlying IMap and its data are kept."""
    if _blank(mapping_name):
        return await reject(
            "sql_drop_mapping", "sql_drop_mapping: mapping_name must be a non-empty string."
        )
    denied = _sql_denial("DROP MAPPING")
    if denied:
        return await deny("sql_drop_mapping", denied)

    statement = f"DROP MAPPING IF EXISTS {_quote_identifier(mapping_name)}"

    def _op(client: Any) -> Dict[str, Any]:
        with _execute(client, statement):
            pass
        return {"mapping": mapping_name, "sql": statement, "message": "Mapping dropped successfully."}

    return await call_store("sql_drop_mapping", _op)


async def sql_show_mappings() -> str:
    """List all SQL mappings defined on the cluster."""
    denied = _sql_denial()
    if denied:
        return await deny("sql_show_mappings", denied)

    def _op(client: Any) -> Dict[str, Any]:
        with _execute(client, "SHOW MAPPINGS") as result:
            mappings = [str(row.get_object_with_index(0)) for row in result]
        return {"count": len(mappings), "mappings": mappings}

    return await call_store("sql_show_mappings", _op)


TOOLS = [sql_execute, sql_create_mapping, sql_drop_mapping, sql_show_mappings]
