"""
Reference data loaded by the admin seeding endpoints.
"""

from typing import Any, Dict, List, Tuple

STANDARDS: List[Dict[str, str]] = [
    {
        "name": "ISO 20000",
        "code": "ISO20000",
        "description": "Information technology - Service management",
        "category": "IT Service Management",
    },
    {
        "name": "ISO 27001",
        "code": "ISO27001",
        "description": "Information security management systems",
        "category": "Information Security",
    },
    {
        "name": "CoBIT 2019",
        "code": "COBIT2019",
        "description": "Control Objectives for Information and Related Technologies",
        "category": "IT Governance",
    },
    {
        "name": "COSO",
        "code": "COSO",
        "description": (
            "Committee of Sponsoring Organizations of the Treadway Commission"
        ),
        "category": "Internal Control",
    },
    {
        "name": "ITIL 4",
        "code": "ITIL4",
        "description": "Information Technology Infrastructure Library",
        "category": "IT Service Management",
    },
    {
        "name": "ISO 9001",
        "code": "ISO9001",
        "description": "Quality management systems",
        "category": "Quality Management",
    },
    {
        "name": "ISO 14001",
        "code": "ISO14001",
        "description": "Environmental management systems",
        "category": "Environmental Management",
    },
    {
        "name": "ISO 45001",
        "code": "ISO45001",
        "description": "Occupational health and safety management systems",
        "category": "Health & Safety",
    },
    {
        "name": "TOGAF 9.2",
        "code": "TOGAF92",
        "description": "The Open Group Architecture Framework",
        "category": "Enterprise Architecture",
    },
    {
        "name": "PMBOK 7",
        "code": "PMBOK7",
        "description": "Project Management Body of Knowledge",
        "category": "Project Management",
    },
    {
        "name": "Six Sigma",
        "code": "SIXSIGMA",
        "description": "Data-driven methodology for process improvement",
        "category": "Process Improvement",
    },
    {
        "name": "Lean Management",
        "code": "LEAN",
        "description": "Methodology focused on minimizing waste",
        "category": "Process Improvement",
    },
]

SAMPLE_KPIS: List[Dict[str, Any]] = [
    {
        "type_of_kpi": "Effectiveness KPI",
        "kpi": "Number of Incidents Caused by Inadequate Capacity",
        "formula": "Number of Incidents Caused by Inadequate Capacity",
        "kpi_direction": "down",
        "target_value": "<5",
        "frequency": "Monthly",
        "receiver": "Capacity Manager",
        "source": "ITSM Tool",
        "active": False,
        "mode": "Manual",
        "tag": "Capacity",
        "category": "IT Operations",
        "level": 0,
        "order": 1,
        "associated_bpmn_processes": ["bpmn-1", "bpmn-2"],
    },
    {
        "type_of_kpi": "Efficiency KPI",
        "kpi": "Response Time for Capacity Issues",
        "formula": "Average time to resolve capacity incidents",
        "kpi_direction": "down",
        "target_value": "<2 hours",
        "frequency": "Daily",
        "receiver": "Capacity Manager",
        "source": "ITSM Tool",
        "active": True,
        "mode": "Automatic",
        "tag": "Capacity",
        "category": "IT Operations",
        "level": 1,
        "order": 1.1,
        "associated_bpmn_processes": ["bpmn-1"],
    },
    {
        "type_of_kpi": "Quality KPI",
        "kpi": "Capacity Planning Accuracy",
        "formula": "Planned vs Actual capacity usage",
        "kpi_direction": "up",
        "target_value": ">90%",
        "frequency": "Monthly",
        "receiver": "Capacity Manager",
        "source": "Capacity Planning Tool",
        "active": True,
        "mode": "Semi-Automatic",
        "tag": "Capacity",
        "category": "IT Operations",
        "level": 1,
        "order": 1.2,
        "associated_bpmn_processes": ["bpmn-2"],
    },
    {
        "type_of_kpi": "Efficiency KPI",
        "kpi": "Total Expenses for Unplanned Capacity",
        "formula": "Total Expenses for Unplanned Capacity",
        "kpi_direction": "down",
        "target_value": "As Is",
        "frequency": "Monthly",
        "receiver": "Capacity Manager",
        "source": "Expenses Report",
        "active": False,
        "mode": "Manual",
        "tag": "Cost",
        "category": "Financial",
        "level": 0,
        "order": 2,
        "associated_bpmn_processes": [],
    },
    {
        "type_of_kpi": "Financial KPI",
        "kpi": "Cost per Capacity Unit",
        "formula": "Total cost / Total capacity units",
        "kpi_direction": "down",
        "target_value": "<$100/unit",
        "frequency": "Monthly",
        "receiver": "Financial Manager",
        "source": "Financial System",
        "active": True,
        "mode": "Automatic",
        "tag": "Cost",
        "category": "Financial",
        "level": 1,
        "order": 2.1,
        "associated_bpmn_processes": ["bpmn-3"],
    },
]

# (child index, parent index) pairs into SAMPLE_KPIS
SAMPLE_KPI_PARENTS: List[Tuple[int, int]] = [(1, 0), (2, 0), (4, 3)]
