# API Models
