class ExitCodes:
    SUCCESS = 0
    ERROR = 1
