from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
import yaml

from gst_invoice.cli import _init_config, _preflight, main


@pytest.fixture
def workspace(monkeypatch, tmp_path, config_dir, invoice_dict):
    """Config dir with a seller, one customer and a local invoice file."""
    monkeypatch.setenv("GST_INVOICE_CONFIG_DIR", str(config_dir))
    monkeypatch.setenv("GST_INVOICE_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.delenv("GST_STANDARD_RATE", raising=False)
    local = {k: v for k, v in invoice_dict.items() if k not in ("_id", "cgstRate", "sgstRate", "igstRate")}
    local["customer"] = "blr-tools"
    path = tmp_path / "INV-7.yaml"
    path.write_text(yaml.dump(local))
    return path


class TestMain:
    @patch("gst_invoice.cli._init_config")
    def test_init_dispatches(self, mock_init):
        main(["init"])
        mock_init.assert_called_once()

    @patch("gst_invoice.cli._preflight", return_value=False)
    def test_exit_1_on_failed_preflight(self, mock_preflight, tmp_path):
        with pytest.raises(SystemExit, match="1"):
            main(["render", str(tmp_path / "x.yaml")])

    def test_words(self, capsys):
        main(["words", "100000"])
        assert capsys.readouterr().out == "One Lakh Rupees only\n"

    def test_words_invalid_amount(self, capsys):
        with pytest.raises(SystemExit, match="1"):
            main(["words", "-5"])
        assert "Error:" in capsys.readouterr().out

    def test_missing_api_setting(self, monkeypatch, capsys):
        monkeypatch.delenv("INVOICE_API_BASE_URL", raising=False)
        with pytest.raises(SystemExit, match="1"):
            main(["next-number"])
        assert "INVOICE_API_BASE_URL" in capsys.readouterr().out


class TestRender:
    def test_text_preview(self, workspace, capsys):
        main(["render", str(workspace), "--text"])
        out = capsys.readouterr().out
        assert "TAX INVOICE" in out
        assert "CGST @ 9%" in out
        assert "2,360.00" in out

    def test_pdf_written_and_registered(self, workspace, tmp_path, capsys):
        main(["render", str(workspace)])
        pdf = tmp_path / "data" / "documents" / "INV-7.pdf"
        assert pdf.read_bytes().startswith(b"%PDF")
        assert "written to" in capsys.readouterr().out
        main(["documents"])
        assert "INV-7" in capsys.readouterr().out

    def test_output_option(self, workspace, tmp_path):
        out = tmp_path / "out" / "copy.pdf"
        main(["render", str(workspace), "-o", str(out)])
        assert out.exists()

    def test_invalid_invoice_reports_fields(self, workspace, capsys):
        data = yaml.safe_load(workspace.read_text())
        data["items"][0]["quantity"] = 0
        workspace.write_text(yaml.dump(data))
        with pytest.raises(SystemExit, match="1"):
            main(["render", str(workspace), "--text"])
        assert "items[0].quantity" in capsys.readouterr().out

    def test_unknown_state_reports_error(self, workspace, config_dir, capsys):
        path = config_dir / "customers" / "blr-tools.yaml"
        data = yaml.safe_load(path.read_text())
        data["address"]["state"] = "Atlantis"
        path.write_text(yaml.dump(data))
        with pytest.raises(SystemExit, match="1"):
            main(["render", str(workspace), "--text"])
        assert "Atlantis" in capsys.readouterr().out


class TestStoreCommands:
    @patch("gst_invoice.services.invoicing.suggest_invoice_no", return_value="INV-8")
    def test_next_number(self, mock_suggest, monkeypatch, capsys):
        monkeypatch.setenv("INVOICE_API_BASE_URL", "http://records.test/api/")
        main(["next-number"])
        mock_suggest.assert_called_once_with("http://records.test/api")
        assert capsys.readouterr().out == "INV-8\n"

    @patch("gst_invoice.services.invoicing.suggest_customer_id", return_value="CUST-2")
    def test_next_customer_id(self, mock_suggest, monkeypatch, capsys):
        monkeypatch.setenv("INVOICE_API_BASE_URL", "http://records.test/api")
        main(["next-number", "--customer"])
        assert capsys.readouterr().out == "CUST-2\n"

    @patch("gst_invoice.services.invoicing.render_from_store")
    def test_fetch(self, mock_render, workspace, monkeypatch, tmp_path, capsys):
        monkeypatch.setenv("INVOICE_API_BASE_URL", "http://records.test/api")
        prepared = MagicMock()
        prepared.snapshot.invoice_no = "INV-7"
        artifact = MagicMock(filename="INV-7.pdf", content=b"%PDF")
        mock_render.return_value = (prepared, artifact)
        with patch("gst_invoice.services.invoicing.save_artifact", return_value="/x/INV-7.pdf"):
            main(["fetch", "inv-record-1"])
        assert mock_render.call_args.args[:2] == ("http://records.test/api", "inv-record-1")
        assert "Invoice INV-7 written to /x/INV-7.pdf" in capsys.readouterr().out


class TestCustomers:
    def test_lists_local_customers(self, monkeypatch, config_dir, capsys):
        monkeypatch.setenv("GST_INVOICE_CONFIG_DIR", str(config_dir))
        main(["customers"])
        out = capsys.readouterr().out
        assert "blr-tools" in out
        assert "Bangalore Tools Pvt Ltd" in out

    def test_empty(self, monkeypatch, tmp_path, capsys):
        monkeypatch.setenv("GST_INVOICE_CONFIG_DIR", str(tmp_path))
        main(["customers"])
        assert "No local customers." in capsys.readouterr().out


class TestDocuments:
    def test_empty(self, monkeypatch, tmp_path, capsys):
        monkeypatch.setenv("GST_INVOICE_DATA_DIR", str(tmp_path))
        main(["documents"])
        assert "No rendered documents." in capsys.readouterr().out


class TestPreflight:
    def test_ok(self, monkeypatch, config_dir, tmp_path):
        data_dir = tmp_path / "data"
        monkeypatch.setattr("gst_invoice.config.get_config_dir", lambda: config_dir)
        monkeypatch.setattr("gst_invoice.config.get_data_dir", lambda: data_dir)
        assert _preflight() is True
        assert data_dir.is_dir()

    def test_no_config(self, monkeypatch, tmp_path, capsys):
        monkeypatch.setattr("gst_invoice.config.get_config_dir", lambda: tmp_path / "missing")
        monkeypatch.setattr("gst_invoice.config.get_data_dir", lambda: tmp_path / "data")
        assert _preflight() is False
        assert "gst-invoice init" in capsys.readouterr().out

    def test_no_seller(self, monkeypatch, tmp_path, capsys):
        cfg = tmp_path / "config"
        cfg.mkdir()
        monkeypatch.setattr("gst_invoice.config.get_config_dir", lambda: cfg)
        monkeypatch.setattr("gst_invoice.config.get_data_dir", lambda: tmp_path / "data")
        assert _preflight() is False
        assert "seller.yaml not found" in capsys.readouterr().out


class TestInitConfig:
    def test_copies_templates(self, monkeypatch, tmp_path, capsys):
        cfg = tmp_path / "config"
        monkeypatch.setattr("gst_invoice.config.get_config_dir", lambda: cfg)
        monkeypatch.setattr("gst_invoice.config.get_data_dir", lambda: tmp_path / "data")
        _init_config()
        assert (cfg / "seller.yaml.example").exists()
        assert (cfg / "customers" / "acme-traders.yaml.example").exists()
        assert (cfg / "invoices" / "INV-1.yaml.example").exists()
        assert "Next steps" in capsys.readouterr().out

    def test_skips_existing(self, monkeypatch, tmp_path, capsys):
        cfg = tmp_path / "config"
        monkeypatch.setattr("gst_invoice.config.get_config_dir", lambda: cfg)
        monkeypatch.setattr("gst_invoice.config.get_data_dir", lambda: tmp_path / "data")
        _init_config()
        capsys.readouterr()
        _init_config()
        assert "No new files created" in capsys.readouterr().out

    def test_templates_render(self, monkeypatch, tmp_path, capsys):
        """The bundled example files are a complete, printable invoice."""
        cfg = tmp_path / "config"
        monkeypatch.setattr("gst_invoice.config.get_config_dir", lambda: cfg)
        monkeypatch.setattr("gst_invoice.config.get_data_dir", lambda: tmp_path / "data")
        monkeypatch.delenv("GST_STANDARD_RATE", raising=False)
        _init_config()
        (cfg / "seller.yaml.example").rename(cfg / "seller.yaml")
        (cfg / "customers" / "acme-traders.yaml.example").rename(cfg / "customers" / "acme-traders.yaml")
        capsys.readouterr()
        main(["render", str(cfg / "invoices" / "INV-1.yaml.example"), "--text"])
        out = capsys.readouterr().out
        assert "IGST @ 18%" in out
        assert "2,360.00" in out
