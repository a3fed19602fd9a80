"""
Tests for plansync models and settings

Test strategy:
1. Unit tests for the Pydantic models (validators, row mapping)
2. Unit tests for the migration report aggregation
3. Settings defaults and bounds
"""

from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest
from pydantic import ValidationError

from plansync.config import StoreSettings, load_settings
from plansync.models import (
    AccountPreference,
    AuditSeverity,
    MigrationEventBuilder,
    MigrationEventType,
    MigrationReport,
    MonthlyManualSaving,
    Project,
    SavingGoal,
    StepResult,
    StepStatus,
    Transaction,
    TransactionType,
)


class TestProjectModel:
    """Tests for the Project model."""

    def test_project_strips_whitespace(self):
        project = Project(name="  Trip  ")
        assert project.name == "Trip"

    def test_project_rejects_empty_name(self):
        with pytest.raises(ValidationError):
            Project(name="   ")

    def test_project_from_row_maps_store_columns(self):
        row = {
            "id": 7,
            "name": "Car",
            "startDate": "2024-01",
            "endDate": "2024-12-31",
            "plannedBudget": 1200.5,
            "archived": 1,
        }
        project = Project.from_row(row)
        assert project.id == 7
        assert project.start_date == "2024-01"
        assert project.planned_budget == Decimal("1200.5")
        assert project.archived is True

    def test_project_from_row_without_archived_column(self):
        """Stores predating archiving have no archived column."""
        row = {
            "id": 1,
            "name": "Trip",
            "startDate": None,
            "endDate": None,
            "plannedBudget": None,
        }
        project = Project.from_row(row)
        assert project.archived is False
        assert project.planned_budget is None


class TestSavingGoalModel:
    """Tests for the SavingGoal model."""

    def test_dates_are_normalized_to_first_of_month(self):
        goal = SavingGoal(
            project_id=1,
            amount=Decimal("100"),
            start_date=date(2024, 3, 17),
            end_date=date(2024, 6, 30),
        )
        assert goal.start_date == date(2024, 3, 1)
        assert goal.end_date == date(2024, 6, 1)

    def test_end_before_start_is_rejected(self):
        with pytest.raises(ValidationError):
            SavingGoal(
                project_id=1,
                amount=Decimal("100"),
                start_date=date(2024, 6, 1),
                end_date=date(2024, 1, 1),
            )

    def test_negative_amount_is_rejected(self):
        with pytest.raises(ValidationError):
            SavingGoal(project_id=1, amount=Decimal("-1"), start_date=date(2024, 1, 1))

    def test_open_ended_goal(self):
        goal = SavingGoal(
            project_id=1,
            amount=Decimal("334"),
            start_date=date(2024, 1, 1),
            reason="initial",
        )
        assert goal.end_date is None
        assert goal.is_initial

    def test_from_row_accepts_stored_timestamps(self):
        row = {
            "id": 3,
            "project_id": 2,
            "amount": 334.0,
            "start_date": "2024-01-01",
            "end_date": None,
            "created_at": "2024-05-01 12:30:00",
            "reason": "initial",
        }
        goal = SavingGoal.from_row(row)
        assert goal.amount == Decimal("334")
        assert goal.created_at.year == 2024


class TestAuxiliaryModels:
    """Tests for preferences and the auxiliary record models."""

    def test_account_preference_flags_are_independent(self):
        pref = AccountPreference(
            account_id="acc-1",
            account_name="Savings",
            include_savings=True,
            include_checking=False,
        )
        assert pref.include_savings and not pref.include_checking

    def test_account_preference_from_row_with_null_name(self):
        row = {
            "accountId": "acc-2",
            "accountName": None,
            "includeSavings": 0,
            "includeChecking": 1,
        }
        pref = AccountPreference.from_row(row)
        assert pref.account_name == ""
        assert pref.include_savings is False
        assert pref.include_checking is True

    def test_monthly_manual_saving_from_row(self):
        row = {
            "id": "m1",
            "month": "2024-01",
            "amount": 250.1,
            "createdAt": "2024-01-31 10:00:00",
            "updatedAt": None,
        }
        saving = MonthlyManualSaving.from_row(row)
        assert saving.amount == Decimal("250.1")
        assert saving.created_at.day == 31
        assert saving.updated_at is None

    def test_project_name_has_no_length_cap(self):
        project = Project.from_row(
            {
                "id": 1,
                "name": "x" * 250,
                "startDate": None,
                "endDate": None,
                "plannedBudget": None,
            }
        )
        assert len(project.name) == 250

    def test_transaction_type(self):
        tx = Transaction(
            id="t1",
            date="2024-01-05",
            description="Groceries",
            amount=Decimal("42.10"),
            type="expense",
            category="Food",
        )
        assert tx.type == TransactionType.EXPENSE

    def test_transaction_rejects_unknown_type(self):
        with pytest.raises(ValidationError):
            Transaction(
                id="t1",
                date="2024-01-05",
                description="Refund",
                amount=Decimal("5"),
                type="transfer",
                category="Misc",
            )


class TestMigrationReport:
    """Tests for the aggregate migration result."""

    def test_empty_report_succeeds(self):
        report = MigrationReport()
        assert report.succeeded
        assert not report.changed

    def test_report_aggregates_step_outcomes(self):
        report = MigrationReport(
            results=[
                StepResult(name="projects_table", status=StepStatus.UNCHANGED),
                StepResult(name="transactions", status=StepStatus.APPLIED),
                StepResult(name="account_preferences", status=StepStatus.FAILED, error="boom"),
            ]
        )
        assert report.changed
        assert not report.succeeded
        assert report.failed_steps == ["account_preferences"]
        assert report.applied_steps == ["transactions"]
        assert report.status_of("projects_table") == StepStatus.UNCHANGED
        assert report.status_of("unknown") is None


class TestAuditEvents:
    """Tests for audit event builders."""

    def test_step_failed_is_an_error(self):
        event = MigrationEventBuilder.step_failed("transactions", "disk I/O error")
        assert event.event_type == MigrationEventType.STEP_FAILED
        assert event.severity == AuditSeverity.ERROR
        assert event.error_message == "disk I/O error"

    def test_to_log_dict_is_serializable(self):
        event = MigrationEventBuilder.projects_imported(3, "/tmp/Comptes.cdb")
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "projects_imported"
        assert isinstance(log_dict["event_id"], str)


class TestSettings:
    """Tests for configuration defaults."""

    def test_paths_default_to_data_dir(self, tmp_path):
        settings = load_settings(data_dir=tmp_path)
        assert settings.store.store_path == tmp_path / "iComptaBudgetData.sqlite"
        assert settings.store.ledger_path == tmp_path / "Comptes.cdb"

    def test_explicit_path_wins(self, tmp_path):
        settings = load_settings(data_dir=tmp_path, store_path=tmp_path / "other.sqlite")
        assert settings.store.store_path == tmp_path / "other.sqlite"
        assert settings.store.ledger_path == tmp_path / "Comptes.cdb"

    def test_environment_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("PLANSYNC_DATA_DIR", str(tmp_path))
        monkeypatch.setenv("PLANSYNC_LEDGER_READ_ATTEMPTS", "5")
        store = StoreSettings()
        assert store.store_path == Path(tmp_path) / "iComptaBudgetData.sqlite"
        assert store.ledger_read_attempts == 5

    def test_read_attempts_bounds(self):
        with pytest.raises(ValidationError):
            StoreSettings(ledger_read_attempts=0)
