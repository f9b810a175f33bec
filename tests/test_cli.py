"""
Tests for the command line browser.

Run with: pytest tests/test_cli.py -v
"""

import pytest

import main


@pytest.fixture
def patched_store(monkeypatch, store):
    monkeypatch.setattr(main, "CatalogStore", lambda: store)
    return store


class TestCLIArguments:
    """Argument parsing."""

    def test_repeatable_facets(self):
        args = main.parse_args(["--type", "Polos", "--type", "Hoodies", "--brand", "Gildan"])
        filters = main.filters_from_args(args)
        assert filters.product_types == ["Polos", "Hoodies"]
        assert filters.brands == ["Gildan"]
        assert filters.sizes is None

    def test_price_and_search(self):
        args = main.parse_args(["-s", "navy polo", "--price-min", "5", "--price-max", "20"])
        filters = main.filters_from_args(args)
        assert filters.search_query == "navy polo"
        assert (filters.price_min, filters.price_max) == (5, 20)

    def test_defaults(self):
        args = main.parse_args([])
        assert args.page == 1
        assert args.smart is None
        assert main.filters_from_args(args).is_empty()

    def test_size_filter_and_size_menu_are_separate(self):
        args = main.parse_args(["--sizes", "--size", "M", "--type", "Hoodies"])
        assert args.show_sizes is True
        assert main.filters_from_args(args).sizes == ["M"]

    def test_local_only_disables_remote(self, patched_store):
        args = main.parse_args(["--local-only"])
        browser = main.create_browser(args)
        assert browser.smart_search_client.config.remote_enabled is False


class TestCLICommands:
    """Each command returns an exit code."""

    def test_browse(self, patched_store, capsys):
        assert main.main(["--brand", "Gildan"]) == 0
        assert "GD001" in capsys.readouterr().out

    def test_no_results(self, patched_store, capsys):
        assert main.main(["--brand", "Nobody"]) == 0
        assert "No products match" in capsys.readouterr().out

    def test_options(self, patched_store, capsys):
        assert main.main(["--options"]) == 0
        assert "product_types" in capsys.readouterr().out

    def test_sizes(self, patched_store, capsys):
        assert main.main(["--sizes", "--type", "Hoodies"]) == 0
        assert "3/4 Years" in capsys.readouterr().out

    def test_browse_by_size(self, patched_store, capsys):
        assert main.main(["--size", "XL"]) == 0
        out = capsys.readouterr().out
        assert "BC100" in out
        assert "GD001" not in out
        assert "No sizes found" not in out

    def test_smart(self, patched_store, capsys):
        assert main.main(["--smart", "organic tee", "--local-only"]) == 0
        assert "BC100" in capsys.readouterr().out

    def test_missing_credentials(self, monkeypatch):
        def no_credentials():
            raise ValueError("Supabase credentials required.")

        monkeypatch.setattr(main, "CatalogStore", no_credentials)
        assert main.main([]) == 1
