import csv

import pytest

import codec
import experiments as ex


@pytest.mark.parametrize("name", sorted(ex.DATASETS))
def test_datasets_have_requested_size(name):
    assert len(ex.make_dataset(name, 300, seed=4)) == 300


def test_drift_is_seeded():
    assert ex.drifting_readings(400, seed=9) == ex.drifting_readings(400, seed=9)
    assert ex.drifting_readings(400, seed=9).startswith(b"TEMP:")


def test_unknown_dataset():
    with pytest.raises(ValueError):
        ex.make_dataset("pressure", 10, seed=0)


def test_measure_accounts_for_every_wire_byte():
    data = ex.make_dataset("temperature", 2048, seed=1)
    run = ex.measure(data, "temperature", 1)
    payload = codec.compress(data)
    assert run.decoders_agree
    assert set(run.decode_ms) == set(codec.DECODERS)
    assert run.data_bits == payload.bit_length
    assert run.pad_bits == payload.pad_bits
    # data bits plus padding fill the packed bytes exactly
    assert (run.data_bits + run.pad_bits) % 8 == 0
    assert run.wire_bytes == run.overhead_bytes + (run.data_bits + run.pad_bits) // 8
    assert run.wire_ratio < 1.0
    assert run.bits_per_symbol >= run.entropy - 1e-9


def test_measure_empty_input():
    run = ex.measure(b"")
    assert run.decoders_agree
    assert run.data_bits == 0
    # bare HUF1 header and trailer
    assert run.wire_bytes == run.overhead_bytes == 15


def test_small_inputs_pay_for_the_code_table():
    run = ex.measure(ex.make_dataset("humidity", 16, seed=0))
    assert run.wire_ratio > 1.0


def test_summary_and_csv(tmp_path):
    runs = [ex.measure(ex.make_dataset("motion", 512, seed=r), "motion", r) for r in (1, 2, 3)]
    summary = ex.summarize(runs)
    assert len(summary) == 1
    assert summary[0]["n_runs"] == 3
    assert summary[0]["all_agree"] is True
    assert "decode_tree_ms" in summary[0] and "decode_table_ms" in summary[0]

    ex.write_rows(tmp_path / "runs.csv", [r.flat() for r in runs])
    with (tmp_path / "runs.csv").open(newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert len(rows) == 3
    assert "decode_table_ms" in rows[0]


def test_main_small_run(tmp_path, capsys):
    rc = ex.main([
        "--outdir", str(tmp_path), "--runs", "1",
        "--sizes", "64,256", "--datasets", "power,temperature_drift",
    ])
    assert rc == 0
    assert (tmp_path / "summary.csv").exists()
    for chart in ("wire_ratio.png", "overhead_share.png", "decode_time.png"):
        assert (tmp_path / chart).exists()
    assert "Decoder mismatches: 0" in capsys.readouterr().out


def test_main_rejects_unknown_dataset(tmp_path):
    assert ex.main(["--outdir", str(tmp_path), "--datasets", "pressure"]) == 2
