"""HR: departments, employees, attendance, leave and payroll."""
