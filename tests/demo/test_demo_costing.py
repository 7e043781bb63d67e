"""
The costing walkthrough script runs end to end.

Runs ``scripts/demo_costing.py`` in-process through ``main(argv)``, with
and without a configuration set, and checks the printed scenario results.
"""

import json

from scripts.demo_costing import main


class TestDemoCosting:

    def test_plain_walkthrough(self, capsys):
        assert main([]) == 0

        out = capsys.readouterr().out
        assert "rejected [INSUFFICIENT_STOCK]" in out
        assert "COGS for 200: 5200" in out
        assert "Configured grades" not in out

    def test_walkthrough_with_default_config(self, capsys):
        assert main(["--config", "default"]) == 0

        out = capsys.readouterr().out
        assert "Configured grades:" in out
        for grade in ("Premium Diesel", "Diesel", "Gasohol 95", "Gasohol 91", "E20", "E85"):
            assert grade in out
        assert "Scenario 5" in out

    def test_json_dump(self, capsys):
        assert main(["--config", "default", "--json"]) == 0

        out = capsys.readouterr().out
        records = json.loads(out[out.index("\n[") + 1:])
        by_id = {r["commodity_id"]: r for r in records}
        assert set(by_id) == {"Diesel", "Gasohol95"}
        assert by_id["Diesel"]["current_stock"] == "1300"
        assert by_id["Diesel"]["average_cost"] == "26"
        assert by_id["Gasohol95"]["average_cost"] == "40"
