"""
Regression tests for import issues.

Every public entry point must import without a running host or MCP client.
"""


def test_package_exports():
    import outline_tags

    assert outline_tags.__version__
    assert outline_tags.TagEngine is not None
    assert outline_tags.TagService is not None


def test_mcp_server_imports():
    import outline_tags.mcp_server as server

    assert hasattr(server, 'logging'), "mcp_server.py must import 'logging'"
    assert callable(server.main)
    assert server.mcp is not None


def test_cli_imports():
    from outline_tags.cli.main import build_parser, main

    assert callable(main)
    assert build_parser().prog == "outline-tags"
