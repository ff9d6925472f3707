"""Test the command line send mode"""

import argparse
import json

import pytest

from main import run_send
from pullchunk.config import TransferConfig


class TestSend:
    """Summary output of the send mode"""

    @pytest.mark.asyncio
    async def test_summary_is_json_without_flag(self, temp_dir, capsys):
        source = temp_dir / "notes.txt"
        source.write_bytes(b"n" * 5000)
        config = TransferConfig().update(output_dir=temp_dir / "received", chunk_size=1024)
        args = argparse.Namespace(files=[str(source)], json=False)

        code = await run_send(args, config)

        out = capsys.readouterr().out
        summary = json.loads(out)
        assert code == 0
        assert "\n" not in out.strip()
        assert [r['status'] for r in summary['results']] == ['completed']
        assert summary['results'][0]['bytes_written'] == 5000

    @pytest.mark.asyncio
    async def test_json_flag_indents_summary(self, temp_dir, capsys):
        source = temp_dir / "notes.txt"
        source.write_bytes(b"abc")
        config = TransferConfig().update(output_dir=temp_dir / "received")
        args = argparse.Namespace(files=[str(source)], json=True)

        await run_send(args, config)

        out = capsys.readouterr().out
        assert out.startswith("{\n  ")
        assert json.loads(out)['results'][0]['status'] == 'completed'

    @pytest.mark.asyncio
    async def test_missing_file_fails(self, temp_dir, capsys):
        config = TransferConfig().update(output_dir=temp_dir / "received")
        args = argparse.Namespace(files=[str(temp_dir / "missing.bin")], json=False)

        code = await run_send(args, config)

        assert code == 1
        assert json.loads(capsys.readouterr().out)['results'] == []
