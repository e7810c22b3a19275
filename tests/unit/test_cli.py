"""Tests for the command line interface."""

import pytest
from unittest.mock import AsyncMock, patch

from dataflow_tips import cli
from dataflow_tips.errors import AcquisitionError


class TestCli:
    
    @pytest.mark.asyncio
    async def test_ask_prints_answer(self, capsys):
        with patch.object(cli, "DataflowTipsClient") as client_class:
            client_class.return_value.ask = AsyncMock(return_value="The watermark is stuck")
            await cli.ask("Why is my job lagging?")
        
        assert capsys.readouterr().out == "The watermark is stuck\n"
    
    @pytest.mark.asyncio
    async def test_ask_prints_errors(self, capsys):
        with patch.object(cli, "DataflowTipsClient") as client_class:
            client_class.return_value.ask = AsyncMock(
                side_effect=AcquisitionError("Failed to initialize tool provider 'dataflow'", provider_name="dataflow")
            )
            await cli.ask("Why?")
        
        assert capsys.readouterr().out == "Error: Failed to initialize tool provider 'dataflow'\n"
    
    @pytest.mark.asyncio
    async def test_list_tools(self, capsys):
        tools = [{"name": "dataflow_Job_Details", "provider": "dataflow", "tool": "Job Details",
                  "description": "Get Dataflow's job detailed information."}]
        with patch.object(cli, "DataflowTipsClient") as client_class:
            client_class.return_value.list_tools = AsyncMock(return_value=tools)
            await cli.list_tools()
        
        out = capsys.readouterr().out
        assert "dataflow_Job_Details (dataflow: Job Details)" in out
        assert "Get Dataflow's job detailed information." in out
    
    def test_no_command_prints_help(self, capsys, monkeypatch):
        monkeypatch.setattr("sys.argv", ["dataflow-tips"])
        cli.main()
        assert "usage:" in capsys.readouterr().out
