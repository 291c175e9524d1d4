"""Verify package imports work correctly."""


def test_import_tessera() -> None:
    """Test that tessera can be imported and version matches pyproject."""
    import tomllib
    from pathlib import Path

    import tessera

    with (Path(__file__).resolve().parent.parent / "pyproject.toml").open("rb") as f:
        expected = tomllib.load(f)["project"]["version"]
    assert tessera.__version__ == expected


def test_version_format() -> None:
    """Test version string format."""
    from tessera import __version__

    parts = __version__.split(".")
    assert len(parts) == 3
    assert all(part.isdigit() for part in parts)


def test_public_names_exported() -> None:
    """Every name in __all__ resolves on the package."""
    import tessera

    for name in tessera.__all__:
        assert hasattr(tessera, name), name
