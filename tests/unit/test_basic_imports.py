"""Test basic avena_loadgen import in pytest."""


def test_basic_import():
    """Test that we can import avena_loadgen."""
    import avena_loadgen

    assert avena_loadgen.__version__


def test_engine_import():
    """Test that we can import the engine."""
    import avena_loadgen.engine

    assert avena_loadgen.engine.LoadEngine is not None


def test_cli_import():
    """Test that we can import the command line entry point."""
    from avena_loadgen.cli import main

    assert callable(main)
