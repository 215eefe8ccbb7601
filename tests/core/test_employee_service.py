"""
Tests for EmployeeService.
"""

import pytest


@pytest.fixture
async def employees(memory_backend, task_service, clock):
    from taskflow.services.employees import EmployeeService

    service = EmployeeService(memory_backend, task_service, clock=clock)
    await service.load()
    return service


@pytest.fixture
def employee_data():
    return {
        "name": "Eve Example",
        "email": "eve@example.com",
        "password": "secret",
        "department": "Finance",
        "position": "Analyst",
    }


class TestAddEmployee:
    """Tests for add_employee()."""

    @pytest.mark.asyncio
    async def test_add_employee(self, employees, admin, employee_data, clock):
        """Test the new user is an employee created by the admin."""
        employee = await employees.add_employee(admin, **employee_data)

        assert employee.role == "employee"
        assert employee.created_by == "admin-1"
        assert employee.created_at == clock.now()
        assert employees.list_employees() == [employee]

    @pytest.mark.asyncio
    async def test_add_employee_persists(self, employees, admin, employee_data, memory_backend, task_service, clock):
        """Test the roster survives a reload."""
        from taskflow.services.employees import EmployeeService

        employee = await employees.add_employee(admin, **employee_data)

        reloaded = EmployeeService(memory_backend, task_service, clock=clock)
        await reloaded.load()

        assert [u.id for u in reloaded.list_employees()] == [employee.id]
        assert reloaded.get_user(employee.id).department == "Finance"

    @pytest.mark.asyncio
    async def test_duplicate_email(self, employees, admin, employee_data):
        """Test emails are unique regardless of case."""
        from taskflow.errors import DuplicateUserError

        await employees.add_employee(admin, **employee_data)
        employee_data["email"] = "EVE@Example.com"

        with pytest.raises(DuplicateUserError):
            await employees.add_employee(admin, **employee_data)

        assert len(employees.list_employees()) == 1

    @pytest.mark.asyncio
    async def test_non_admin_refused(self, employees, admin, employee_data):
        """Test employees cannot manage the roster."""
        from taskflow.errors import PermissionDeniedError

        employee = await employees.add_employee(admin, **employee_data)

        with pytest.raises(PermissionDeniedError):
            await employees.add_employee(employee, name="Mal", email="mal@example.com", password="x")

        assert len(employees.list_employees()) == 1


class TestDeleteEmployee:
    """Tests for delete_employee()."""

    @pytest.mark.asyncio
    async def test_delete_keeps_tasks(self, employees, admin, employee_data, task_service):
        """Test deleting an employee does not delete their tasks."""
        employee = await employees.add_employee(admin, **employee_data)
        task = await employees.assign_task(admin, employee.id, "Audit", deadline="")

        assert await employees.delete_employee(admin, employee.id) is True
        assert employees.list_employees() == []
        assert task_service.get_task(task.id) is not None

    @pytest.mark.asyncio
    async def test_delete_missing(self, employees, admin):
        assert await employees.delete_employee(admin, "missing") is False

    @pytest.mark.asyncio
    async def test_delete_requires_admin(self, employees, admin, employee_data):
        from taskflow.errors import PermissionDeniedError

        employee = await employees.add_employee(admin, **employee_data)

        with pytest.raises(PermissionDeniedError):
            await employees.delete_employee(employee, employee.id)


class TestRoster:
    """Tests for listing, assigning and summaries."""

    @pytest.mark.asyncio
    async def test_search(self, employees, admin):
        """Test search matches name, email or department."""
        eve = await employees.add_employee(admin, "Eve", "eve@example.com", "x", department="Finance")
        bob = await employees.add_employee(admin, "Bob", "bob@corp.io", "x", department="Sales")

        assert employees.list_employees("fin") == [eve]
        assert employees.list_employees("CORP") == [bob]
        assert employees.list_employees("") == [eve, bob]
        assert employees.list_employees("nobody") == []

    @pytest.mark.asyncio
    async def test_admins_not_on_roster(self, memory_backend, task_service, clock):
        """Test only employee users are listed."""
        from taskflow.db.memory import MemoryBackend
        from taskflow.services.employees import EmployeeService

        backend = MemoryBackend({"users": [
            {"id": "a1", "name": "Ada", "email": "ada@example.com", "role": "admin"},
            {"id": "e1", "name": "Eve", "email": "eve@example.com", "role": "employee"},
        ]})
        service = EmployeeService(backend, task_service, clock=clock)
        await service.load()

        assert [u.id for u in service.list_employees()] == ["e1"]
        assert service.find_by_email("ADA@example.com").id == "a1"

    @pytest.mark.asyncio
    async def test_assign_task(self, employees, admin, employee_data, task_service):
        """Test assigned tasks record who assigned them."""
        employee = await employees.add_employee(admin, **employee_data)

        task = await employees.assign_task(admin, employee.id, "Audit", deadline="", priority="high")

        assert task.assigned_to == employee.id
        assert task.assigned_by == "admin-1"
        assert task.assigned_by_name == "Ada Admin"
        assert task.priority == "high"
        assert task_service.get_by_assignee(employee.id) == [task]

    @pytest.mark.asyncio
    async def test_employee_summary(self, employees, admin, employee_data, task_service):
        """Test summary counts total, active and completed tasks."""
        employee = await employees.add_employee(admin, **employee_data)
        first = await employees.assign_task(admin, employee.id, "One", deadline="")
        second = await employees.assign_task(admin, employee.id, "Two", deadline="")
        await employees.assign_task(admin, employee.id, "Three", deadline="")

        await task_service.start_timer(first.id)
        await task_service.complete_task(second.id)

        summary = employees.employee_summary(employee.id)

        assert (summary.total, summary.active, summary.completed) == (3, 1, 1)

    @pytest.mark.asyncio
    async def test_task_overview(self, employees, admin, employee_data, task_service):
        """Test the overview names assignees and falls back to Unknown."""
        employee = await employees.add_employee(admin, **employee_data)
        task = await employees.assign_task(admin, employee.id, "Audit", deadline="")
        orphan = await task_service.add_task(title="Orphan", deadline="", assigned_to="gone")

        overview = employees.task_overview()

        assert [(a.task, a.employee_name) for a in overview] == [
            (task, "Eve Example"),
            (orphan, "Unknown"),
        ]


class BrokenBackend:
    """Backend whose users collection fails with unexpected errors."""

    name = "broken"

    async def load_records(self, collection):
        raise RuntimeError("driver crashed")

    async def save_records(self, collection, records):
        raise TypeError("cannot serialize")


class TestRosterStorageFailures:
    """Tests that a bad users collection never stops the roster."""

    @pytest.mark.asyncio
    async def test_undecodable_users_file(self, tmp_path, task_service, clock):
        """Test a users.json with invalid UTF-8 loads as an empty roster."""
        from taskflow.db.json_file import JSONFileBackend
        from taskflow.services.employees import EmployeeService

        backend = JSONFileBackend(str(tmp_path))
        backend.path_for("users").write_bytes(b'[{"id": "u1", "name": "\xff\xfe"}]')
        service = EmployeeService(backend, task_service, clock=clock)

        assert await service.load() == []
        assert service.list_employees() == []

    @pytest.mark.asyncio
    async def test_unexpected_errors_degrade(self, task_service, clock, admin):
        """Test unexpected backend errors give an empty roster and failed saves."""
        from taskflow.services.employees import EmployeeService

        service = EmployeeService(BrokenBackend(), task_service, clock=clock)

        assert await service.load() == []

        employee = await service.add_employee(admin, "Eve", "eve@example.com", "x")
        assert service.list_employees() == [employee]
        assert await service._save() is False
