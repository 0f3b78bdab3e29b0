"""Payslip service — attendance periods, submissions and payroll computation."""
