from reporting.report import Report, generate_report
from reporting.sink import ReportSink, FileReportSink
