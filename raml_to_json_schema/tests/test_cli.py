import json
from pathlib import Path

from click.testing import CliRunner

from raml_to_json_schema.raml_to_json_schema import main

RAML_DIR = Path(__file__).parent / "test_data" / "raml"


def test_convert_prints_text_report(tmp_path):
    """Test convert renders the text report"""
    out = tmp_path / "out"
    result = CliRunner().invoke(main, ["convert", str(RAML_DIR), str(out)])
    assert result.exit_code == 0, result.output
    assert "Command: raml_to_json_schema convert raml out" in result.stdout
    assert "Business objects created: 3" in result.stdout
    assert "Enums created:            2" in result.stdout
    assert "inline enum      Order.status -> OrderStatus" in result.stdout
    assert (out / "business-objects" / "Order.schema.json").is_file()


def test_convert_json_output(tmp_path):
    """Test convert --json prints the run result"""
    result = CliRunner().invoke(main, ["convert", "--json", str(RAML_DIR), str(tmp_path)])
    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["summary"]["businessObjectsCreated"] == 3
    assert data["enumNames"] == ["OrderStatus", "Color"]


def test_convert_with_naming_convention_and_config(tmp_path):
    """Test command line options override the config file"""
    config = tmp_path / "config.json"
    config.write_text(json.dumps({"naming_convention": "snake_case", "write_scaffold": False}), encoding="utf-8")
    out = tmp_path / "out"
    result = CliRunner().invoke(
        main, ["convert", "--config", str(config), "--naming-convention", "kebab-case", "-w", "2", str(RAML_DIR), str(out)]
    )
    assert result.exit_code == 0, result.output
    assert (out / "business-objects" / "order-line.schema.json").is_file()
    assert not (out / "message.schema.json").exists()


def test_convert_missing_input_dir(tmp_path):
    """Test a missing input directory exits with status 2"""
    result = CliRunner().invoke(main, ["convert", str(tmp_path / "missing"), str(tmp_path / "out")])
    assert result.exit_code == 2


def test_convert_write_failure_exits_with_one(tmp_path):
    """Test a write failure exits with status 1"""
    config = tmp_path / "config.json"
    config.write_text(json.dumps({"output": {"mode": "error"}}), encoding="utf-8")
    out = tmp_path / "out"
    runner = CliRunner()
    assert runner.invoke(main, ["convert", "-c", str(config), str(RAML_DIR), str(out)]).exit_code == 0
    result = runner.invoke(main, ["convert", "-c", str(config), str(RAML_DIR), str(out)])
    assert result.exit_code == 1
    assert "already exists" in result.output


def test_references(tmp_path):
    """Test references on a converted tree, as text and JSON"""
    runner = CliRunner()
    runner.invoke(main, ["convert", str(RAML_DIR), str(tmp_path)])

    result = runner.invoke(main, ["references", str(tmp_path)])
    assert result.exit_code == 0, result.output
    assert "Schemas loaded:        8" in result.stdout
    assert "Unresolved:            0" in result.stdout

    result = runner.invoke(main, ["references", "--json", "-b", "3", "-w", "2", str(tmp_path)])
    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    by_path = {s["relativePath"]: s for s in data["schemas"]}
    assert len(by_path["business-objects/OrderLine.schema.json"]["referencedBy"]) == 2
    assert data["stats"]["unresolved"] == 0
    assert data["stats"]["batches"] == 3


def test_references_reads_batch_size_from_config(tmp_path):
    """Test resolver batching comes from the config file unless overridden"""
    runner = CliRunner()
    runner.invoke(main, ["convert", str(RAML_DIR), str(tmp_path / "out")])
    config = tmp_path / "config.json"
    config.write_text(json.dumps({"reference_batch_size": 2, "reference_max_workers": 3}), encoding="utf-8")

    result = runner.invoke(main, ["references", "--json", "-c", str(config), str(tmp_path / "out")])
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)["stats"]["batches"] == 4

    result = runner.invoke(main, ["references", "--json", "-c", str(config), "-b", "8", str(tmp_path / "out")])
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)["stats"]["batches"] == 1
