"""
outpass - hostel leave and outing approval workflow.

Students submit leave and outing requests; caretakers, wardens and deans
review, approve, reject or forward them; departures and returns are recorded
and completed requests are archived to history.
"""

__version__ = "1.0.0"
